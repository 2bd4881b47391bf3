# auth/dependencies.py
"""
Dependencies de autenticação para injeção nas rotas
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from auth.schemas import AuthContext
from auth.security import decode_token, TokenExpiredError, TokenInvalidError
from utils.audit import log_access_denied
from utils.errors import AuthenticationError, ForbiddenError

# auto_error=False: a ausência do header é tratada aqui, com código próprio
bearer_scheme = HTTPBearer(auto_error=False)


async def get_auth_context(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> AuthContext:
    """
    Valida o Bearer token e devolve a identidade do chamador.

    - Sem token: 401 MISSING_TOKEN
    - Token expirado: 401 TOKEN_EXPIRED
    - Token inválido: 403 INVALID_TOKEN

    Uso:
        @router.get("/rota-protegida")
        def rota(auth: AuthContext = Depends(get_auth_context)):
            ...
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("MISSING_TOKEN", "Token de acesso requerido")

    try:
        claims = decode_token(credentials.credentials)
    except TokenExpiredError:
        raise AuthenticationError("TOKEN_EXPIRED", "Token expirado")
    except TokenInvalidError:
        log_access_denied(None, None, request, "invalid_token")
        raise ForbiddenError("INVALID_TOKEN", "Token inválido")

    try:
        return AuthContext.from_claims(claims)
    except KeyError:
        log_access_denied(None, None, request, "token_missing_claims")
        raise ForbiddenError("INVALID_TOKEN", "Token inválido")


async def require_admin(
    request: Request,
    auth: AuthContext = Depends(get_auth_context),
) -> AuthContext:
    """
    Exige que o chamador seja administrador.
    Lança 403 ADMIN_REQUIRED caso contrário.
    """
    if not auth.is_admin:
        log_access_denied(auth.user_id, auth.user_name, request, "admin_required")
        raise ForbiddenError(
            "ADMIN_REQUIRED",
            "Acesso negado. Privilégios de administrador necessários."
        )
    return auth
