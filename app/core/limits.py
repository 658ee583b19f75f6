from fastapi import status
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers

from app.core.config import settings
from app.core.errors import error_body
from app.core.logging import get_logger

logger = get_logger(__name__)


class BodySizeLimitMiddleware:
    """
    Rejects request bodies larger than MAX_BODY_SIZE with a 413.

    A declared Content-Length is checked up front. Bodies without one
    (chunked uploads) are buffered up to the limit before the app sees them.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        limit = settings.MAX_BODY_SIZE
        content_length = Headers(scope=scope).get("content-length")
        if content_length and content_length.isdigit():
            if int(content_length) > limit:
                await self.reject(scope, receive, send, content_length)
                return
            await self.app(scope, receive, send)
            return

        buffered = []
        size = 0
        more_body = True
        while more_body:
            message = await receive()
            buffered.append(message)
            if message["type"] != "http.request":
                break
            size += len(message.get("body", b""))
            if size > limit:
                await self.reject(scope, receive, send, f"{size}+")
                return
            more_body = message.get("more_body", False)

        async def replay():
            if buffered:
                return buffered.pop(0)
            return await receive()

        await self.app(scope, replay, send)

    async def reject(self, scope, receive, send, size):
        logger.warning(f"Rejected {scope['method']} {scope['path']}: {size} bytes")
        response = JSONResponse(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            content=error_body(status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, "Request body too large"),
        )
        await response(scope, receive, send)
