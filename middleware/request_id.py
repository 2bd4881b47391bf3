# middleware/request_id.py
"""
Request ID por requisição.

Aceita um X-Request-ID vindo do cliente (limitado a 64 caracteres) ou gera
um UUID4. O valor fica em request.state.request_id, no ContextVar lido pelo
logging estruturado e no header da resposta.
"""

import uuid
from contextvars import ContextVar
from typing import Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_ID_HEADER = "X-Request-ID"

_request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def get_request_id() -> Optional[str]:
    """Request ID da requisição atual, ou None fora de uma requisição."""
    return _request_id_ctx.get()


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Propaga o Request ID para o contexto e para a resposta."""

    async def dispatch(self, request: Request, call_next) -> Response:
        incoming = request.headers.get(REQUEST_ID_HEADER)
        request_id = incoming[:64] if incoming else str(uuid.uuid4())

        request.state.request_id = request_id
        token = _request_id_ctx.set(request_id)
        try:
            response: Response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            _request_id_ctx.reset(token)
