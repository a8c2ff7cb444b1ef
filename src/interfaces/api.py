import json
import logging

from aiohttp import web
from pydantic import ValidationError

from src.application.snapshot_service import SnapshotService
from src.domain.models import SnapshotRequest

logger = logging.getLogger(__name__)

SERVICE_KEY = web.AppKey("snapshot_service", SnapshotService)


async def health(request: web.Request) -> web.Response:
    return web.Response(text="OK", status=200)


async def repo_metrics(request: web.Request) -> web.Response:
    """
    POST /api/repo-metrics. Always answers 200 so the dashboard can render something;
    failures are reported in the body next to the sample snapshot.
    """
    service = request.app[SERVICE_KEY]

    if not service.github_client.has_credentials:
        result = await service.respond(SnapshotRequest())
        return web.json_response(result.model_dump(mode="json", by_alias=True), status=200)

    try:
        body = json.loads(await request.text())
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    try:
        snapshot_request = SnapshotRequest.model_validate(body)
    except ValidationError as e:
        logger.warning(f"Rejected metrics request: {e}")
        result = service.fallback(e)
    else:
        result = await service.respond(snapshot_request)

    return web.json_response(result.model_dump(mode="json", by_alias=True), status=200)


def create_app(service: SnapshotService) -> web.Application:
    app = web.Application()
    app[SERVICE_KEY] = service
    app.router.add_get("/health", health)
    app.router.add_post("/api/repo-metrics", repo_metrics)
    return app
