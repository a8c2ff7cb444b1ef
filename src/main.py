import sys
import logging
from aiohttp import web
from dotenv import load_dotenv

from src.config import Settings
from src.infrastructure.github_client import GitHubRestClient
from src.application.snapshot_service import SnapshotService
from src.interfaces.api import create_app

logger = logging.getLogger(__name__)

def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )

def build_app(settings: Settings) -> web.Application:
    # Credential goes to the client only; the service checks it before any request
    github_client = GitHubRestClient(token=settings.github_token, api_url=settings.github_api_url)
    snapshot_service = SnapshotService(github_client=github_client)
    return create_app(snapshot_service)

def run():
    # Load environment variables from .env file
    load_dotenv()
    settings = Settings.from_env()
    configure_logging(settings.log_level)

    if not settings.github_token:
        logger.warning("GITHUB_TOKEN is not set in the environment. Every request will get sample data.")

    logger.info(f"Serving repo metrics on {settings.host}:{settings.port}.")
    web.run_app(build_app(settings), host=settings.host, port=settings.port, print=None)

if __name__ == "__main__":
    run()
