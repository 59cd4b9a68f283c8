"""
HTTP side of the bot: serves images by content id, plus health checks and
the Slack events endpoint.
"""
from email.utils import format_datetime, parsedate
from typing import Callable, Optional
from urllib.parse import quote

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse, Response

from memebot.errors import NotFoundError
from memebot.items import Item
from memebot.logger import logger
from memebot.metrics import InvocationCounter

# Content never changes for a given id, so clients may cache forever.
CACHE_CONTROL = "public, max-age=31536000, immutable"


def is_not_modified(request: Request, etag: str, last_modified: str) -> bool:
    """
    Check the conditional GET headers of a request against an item.
    If-None-Match takes precedence over If-Modified-Since.
    """
    if_none_match = request.headers.get("if-none-match")
    if if_none_match is not None:
        if if_none_match.strip() == "*":
            return True
        return etag in [tag.strip(" W/") for tag in if_none_match.split(",")]

    if_modified_since = request.headers.get("if-modified-since")
    if if_modified_since is not None:
        since = parsedate(if_modified_since)
        modified = parsedate(last_modified)
        return since is not None and modified is not None and since >= modified

    return False


class ItemServer:
    """
    Serves items at '{prefix}/{id}' and builds the public URLs used in replies.

    Only holds a lookup function, never the index itself.
    """

    def __init__(
        self,
        find_item: Callable[[str], Optional[Item]],
        public_host: str,
        display_port: int,
        prefix: str = "/memes",
        scheme: str = "http",
    ):
        self._find_item = find_item
        self.public_host = public_host
        self.display_port = display_port
        self.prefix = prefix.rstrip("/")
        self.scheme = scheme

        self.router = APIRouter(prefix=self.prefix)
        self.router.add_api_route("/", self.serve_without_id, methods=["GET"])
        self.router.add_api_route("/{item_id}", self.serve, methods=["GET"])

    def base_url(self) -> str:
        return f"{self.scheme}://{self.public_host}:{self.display_port}{self.prefix}/"

    def url_for(self, item_id: str) -> str:
        return self.base_url() + quote(item_id)

    def resolve(self, item_id: str) -> Item:
        """
        Raises:
            NotFoundError: If there is no item with this id
        """
        item = self._find_item(item_id)
        if item is None:
            raise NotFoundError(f"id not found: {item_id}")
        return item

    async def serve_without_id(self) -> Response:
        logger.warning("Bad request: no ID specified")
        raise HTTPException(status_code=400, detail="no ID specified")

    async def serve(self, item_id: str, request: Request) -> Response:
        if not item_id:
            return await self.serve_without_id()

        try:
            item = self.resolve(item_id)
        except NotFoundError as e:
            logger.info("%s", e)
            raise HTTPException(status_code=404, detail="Not Found")

        etag = f'"{item.id}"'
        last_modified = format_datetime(item.last_modified, usegmt=True)
        headers = {
            "etag": etag,
            "last-modified": last_modified,
            "cache-control": CACHE_CONTROL,
        }

        if is_not_modified(request, etag, last_modified):
            return Response(status_code=304, headers=headers)

        logger.debug("Serving object id: %s (%d bytes)", item.id, item.size)
        return FileResponse(item.path, headers=headers)


def create_app(
    item_server: ItemServer,
    slack_handler=None,
    counter: Optional[InvocationCounter] = None,
) -> FastAPI:
    """
    Build the FastAPI app. The Slack events route is only mounted when a
    slack_bolt request handler is given (it is left out in serve-only mode).
    """
    counter = counter or InvocationCounter()
    fastapi_app = FastAPI(title="memebot")
    fastapi_app.include_router(item_server.router)

    @fastapi_app.get("/")
    async def ping():
        return JSONResponse({"status": "ok"})

    @fastapi_app.get("/health")
    async def health(request: Request):
        logger.info(
            "Health check from %s (X-Forwarded-For: %s)",
            request.client.host if request.client else "unknown",
            request.headers.get("x-forwarded-for"),
        )
        return PlainTextResponse("Everything looks good!\n" + counter.format_summary())

    if slack_handler is not None:

        @fastapi_app.post("/slack/events")
        async def slack_events(request: Request):
            try:
                data = await request.json()
            except Exception:
                raise HTTPException(status_code=400, detail="No JSON received")

            team_id = data.get("team_id") or (data.get("team") or {}).get("id")
            if team_id:
                counter.increment_bot_invocations(team_id)

            # Delegate to the Slack Bolt FastAPI handler
            return await slack_handler.handle(request)

    return fastapi_app
