# utils/errors.py
"""
Erros da aplicação e handlers de exceção do FastAPI.

Todo erro de negócio é lançado como AppError (ou subclasse) e renderizado
no formato único:

    {"success": false, "message": "...", "error": "CODIGO", ...extras}

O código em "error" é estável e legível por máquina; a mensagem é para
humanos. Erros internos nunca expõem stack trace nem texto do banco.

USO:
    from utils.errors import ConflictError

    raise ConflictError("SKU_EXISTS", "SKU já existe", existingSku=sku)
"""

from typing import Any, Dict

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from utils.logging_config import get_logger

logger = get_logger(__name__)


class AppError(Exception):
    """
    Erro base da aplicação.

    Attributes:
        status_code: Status HTTP da resposta
        code: Código estável (ex: "INVALID_PASSWORD")
        message: Mensagem para o usuário
        extra: Campos adicionais incluídos no corpo da resposta
    """

    status_code = 500

    def __init__(self, code: str, message: str, **extra: Any):
        super().__init__(message)
        self.code = code
        self.message = message
        self.extra = extra

    def to_dict(self) -> Dict[str, Any]:
        body = {"success": False, "message": self.message, "error": self.code}
        body.update(self.extra)
        return body

    def __repr__(self):
        return f"<{type(self).__name__}(code='{self.code}', status={self.status_code})>"


class ValidationError(AppError):
    status_code = 400


class AuthenticationError(AppError):
    status_code = 401


class ForbiddenError(AppError):
    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    status_code = 409


class TooManyAttemptsError(AppError):
    status_code = 429


class InternalError(AppError):
    status_code = 500

    def __init__(self, code: str = "INTERNAL_ERROR", message: str = "Erro interno do servidor", **extra: Any):
        super().__init__(code, message, **extra)


# ==================================================
# HANDLERS
# ==================================================

async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Renderiza AppError no formato padrão."""
    if exc.status_code >= 500:
        logger.error("Erro interno", path=request.url.path, code=exc.code)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Erros de validação do corpo/query viram 400 VALIDATION_ERROR."""
    fields = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        if loc:
            fields.append(".".join(loc))
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "message": "Dados da requisição inválidos",
            "error": "VALIDATION_ERROR",
            "fields": fields,
        },
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Última linha de defesa: loga e responde 500 genérico."""
    logger.exception("Erro não tratado", path=request.url.path, exc_type=type(exc).__name__)
    return JSONResponse(status_code=500, content=InternalError().to_dict())


__all__ = [
    "AppError",
    "ValidationError",
    "AuthenticationError",
    "ForbiddenError",
    "NotFoundError",
    "ConflictError",
    "TooManyAttemptsError",
    "InternalError",
    "app_error_handler",
    "validation_error_handler",
    "unhandled_error_handler",
]
