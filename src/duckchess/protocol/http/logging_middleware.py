from __future__ import annotations

import logging
import re
import time
import uuid
from typing import Any, Awaitable, Callable, Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "x-request-id"

_GAME_PATH = re.compile(r"^/api/games/(?P<game_id>[^/]+)(?:/(?P<action>[^/]+))?/?$")


def game_context(path: str) -> Dict[str, Optional[str]]:
    """Pull ``game_id`` and the trailing action (``move``, ``search``...) from a path."""
    m = _GAME_PATH.match(path)
    if m is None:
        return {"game_id": None, "action": None}
    return {"game_id": m.group("game_id"), "action": m.group("action")}


class RequestIDLoggingMiddleware(BaseHTTPMiddleware):
    """Tag each request with an ID and log it with its game context.

    A client-supplied ``x-request-id`` is reused so callers can correlate
    their own logs; otherwise a fresh UUID is issued. Requests under
    ``/api/games/{game_id}`` also carry the game id and action in every
    record, which makes one game's moves and searches easy to follow.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        start = time.perf_counter()
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        context: Dict[str, Any] = {"request_id": request_id, **game_context(request.url.path)}
        logger.info(
            "request",
            extra={**context, "method": request.method, "path": request.url.path},
        )

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id

        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "response",
            extra={
                **context,
                "status_code": response.status_code,
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return response
