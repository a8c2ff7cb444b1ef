import unittest
from datetime import datetime, timezone

from src.infrastructure.acl import GitHubTranslator


class TestGitHubTranslator(unittest.TestCase):
    def test_to_repository_parses_owner_and_language(self) -> None:
        raw_repo = {
            "name": "example",
            "full_name": "octocat/example",
            "owner": {"login": "octocat"},
            "language": "Python",
        }

        repository = GitHubTranslator.to_repository(raw_repo)

        self.assertEqual(repository.owner, "octocat")
        self.assertEqual(repository.full_name, "octocat/example")
        self.assertEqual(repository.language, "Python")

    def test_to_repository_can_drop_language(self) -> None:
        raw_repo = {"name": "example", "owner": {"login": "octocat"}, "language": "Go"}

        repository = GitHubTranslator.to_repository(raw_repo, keep_language=False)

        self.assertIsNone(repository.language)
        self.assertEqual(repository.full_name, "octocat/example")

    def test_to_pull_request_parses_detail_payload(self) -> None:
        raw_pr = {
            "id": 99,
            "number": 7,
            "title": "Add feature",
            "user": {"login": "octocat", "avatar_url": "https://avatars/octocat"},
            "created_at": "2024-01-01T00:00:00Z",
            "updated_at": "2024-01-02T03:04:05Z",
            "merged_at": "2024-01-02T00:00:00Z",
            "closed_at": "2024-01-02T00:00:00Z",
            "additions": 40,
            "deletions": 10,
            "changed_files": 3,
            "commits": 5,
            "head": {"ref": "feature"},
            "base": {"ref": "main"},
            "html_url": "https://github.com/octocat/example/pull/7",
            "draft": False,
        }

        pr = GitHubTranslator.to_pull_request(raw_pr)

        self.assertEqual(pr.author, "octocat")
        self.assertEqual(pr.avatar_url, "https://avatars/octocat")
        self.assertEqual(pr.updated_at, datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc))
        self.assertEqual(pr.merged_at, datetime(2024, 1, 2, tzinfo=timezone.utc))
        self.assertEqual(pr.churn, 50)
        self.assertEqual(pr.base_ref, "main")
        self.assertEqual(pr.head_ref, "feature")
        self.assertEqual(pr.url, "https://github.com/octocat/example/pull/7")

    def test_unmerged_pull_request_and_missing_user(self) -> None:
        raw_pr = {
            "id": 1,
            "number": 1,
            "title": "WIP",
            "user": None,
            "created_at": "2024-01-01T00:00:00Z",
            "updated_at": "2024-01-01T00:00:00Z",
            "merged_at": None,
            "draft": True,
        }

        pr = GitHubTranslator.to_pull_request(raw_pr)

        self.assertEqual(pr.author, "unknown")
        self.assertIsNone(pr.merged_at)
        self.assertTrue(pr.draft)
        self.assertEqual(pr.additions, 0)

    def test_missing_created_at_raises(self) -> None:
        raw_pr = {"id": 1, "number": 1, "updated_at": "2024-01-01T00:00:00Z"}

        with self.assertRaises(ValueError):
            GitHubTranslator.to_pull_request(raw_pr)
