"""
Middlewares customizados da API de Recortes.
"""

from middleware.request_id import RequestIDMiddleware, get_request_id, REQUEST_ID_HEADER

__all__ = [
    "RequestIDMiddleware",
    "get_request_id",
    "REQUEST_ID_HEADER",
]
