# remen_abs/core/cors.py
from collections.abc import Iterable

from fastapi.middleware.cors import CORSMiddleware
from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

# Headers every cart function answers with, whatever the caller's origin.
OPEN_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
    "Access-Control-Max-Age": "3600",
}


class StorefrontCORSMiddleware(CORSMiddleware):
    """
    CORSMiddleware restricted to `allow_origins`, except for `open_paths`.

    Requests to an open path skip the origin check entirely: the route
    answers its own OPTIONS preflight, and every response (errors
    included) carries OPEN_CORS_HEADERS.
    """

    def __init__(self, app: ASGIApp, open_paths: Iterable[str] = (), **options) -> None:
        super().__init__(app, **options)
        self.open_paths = frozenset(open_paths)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["path"] not in self.open_paths:
            await super().__call__(scope, receive, send)
            return

        async def send_with_cors(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                for name, value in OPEN_CORS_HEADERS.items():
                    headers.setdefault(name, value)
            await send(message)

        await self.app(scope, receive, send_with_cors)
