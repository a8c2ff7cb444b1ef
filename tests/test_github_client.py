import unittest
from unittest.mock import AsyncMock, MagicMock

from src.domain.exceptions import ConfigurationException, GitHubApiException
from src.infrastructure.github_client import GitHubRestClient


def _response(status: int, payload=None, text: str = "", reason: str = "OK") -> AsyncMock:
    response = AsyncMock()
    response.status = status
    response.reason = reason
    response.json = AsyncMock(return_value=payload)
    response.text = AsyncMock(return_value=text)
    response.__aenter__ = AsyncMock(return_value=response)
    response.__aexit__ = AsyncMock(return_value=False)
    return response


class TestGitHubRestClient(unittest.TestCase):
    def test_headers_are_dict(self) -> None:
        token = "test-token"
        client = GitHubRestClient(token=token)

        self.assertIsInstance(client.headers, dict)
        self.assertEqual(client.headers["Authorization"], f"Bearer {token}")
        self.assertTrue(client.has_credentials)

    def test_headers_include_user_agent(self) -> None:
        client = GitHubRestClient(token="t")
        self.assertIn("User-Agent", client.headers)
        self.assertEqual(client.headers["Accept"], "application/vnd.github+json")

    def test_missing_token_has_no_credentials(self) -> None:
        client = GitHubRestClient(token=None)
        self.assertFalse(client.has_credentials)
        self.assertNotIn("Authorization", client.headers)


class TestRequests(unittest.IsolatedAsyncioTestCase):
    async def test_pull_request_listing_sends_paging_and_sort(self) -> None:
        client = GitHubRestClient(token="test-token", api_url="https://github.example/api/")
        session = MagicMock()
        session.get = MagicMock(return_value=_response(200, [{"number": 1}]))

        page = await client.list_pull_requests_page(session, "octocat", "example", page=2)

        self.assertEqual(page, [{"number": 1}])
        url = session.get.call_args.args[0]
        params = session.get.call_args.kwargs["params"]
        self.assertEqual(url, "https://github.example/api/repos/octocat/example/pulls")
        self.assertEqual(params["page"], 2)
        self.assertEqual(params["per_page"], 50)
        self.assertEqual(params["state"], "all")
        self.assertEqual(params["sort"], "updated")
        self.assertEqual(params["direction"], "desc")

    async def test_org_listing_sorts_by_push(self) -> None:
        client = GitHubRestClient(token="test-token")
        session = MagicMock()
        session.get = MagicMock(return_value=_response(200, []))

        await client.list_org_repos_page(session, "acme", page=1)

        self.assertEqual(session.get.call_args.args[0], "https://api.github.com/orgs/acme/repos")
        self.assertEqual(session.get.call_args.kwargs["params"]["sort"], "pushed")
        self.assertEqual(session.get.call_args.kwargs["params"]["per_page"], 100)

    async def test_error_status_raises_with_status_and_body(self) -> None:
        client = GitHubRestClient(token="test-token")
        session = MagicMock()
        session.get = MagicMock(return_value=_response(404, text='{"message": "Not Found"}', reason="Not Found"))

        with self.assertRaises(GitHubApiException) as ctx:
            await client.get_repository(session, "octocat", "missing")

        self.assertEqual(ctx.exception.status, 404)
        self.assertIn("Not Found", str(ctx.exception))
        self.assertIn("404", str(ctx.exception))

    async def test_missing_token_never_calls_out(self) -> None:
        client = GitHubRestClient(token=None)
        session = MagicMock()
        session.get = MagicMock()

        with self.assertRaises(ConfigurationException):
            await client.get_pull_request(session, "octocat", "example", 1)

        session.get.assert_not_called()
