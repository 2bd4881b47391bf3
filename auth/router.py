# auth/router.py
"""
Endpoints de autenticação: login, validação de token e operação do bloqueio por IP
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from auth.dependencies import get_auth_context, require_admin
from auth.schemas import AuthContext, LoginRequest, LoginResponse, PublicUser, ValidateResponse
from auth.service import Authenticator
from database.connection import get_db
from utils.brute_force import BruteForceProtection, brute_force_guard, get_brute_force_protection
from utils.errors import NotFoundError
from utils.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["Autenticação"])


@router.post("/login", response_model=LoginResponse)
async def login(
    request: Request,
    body: Optional[LoginRequest] = None,
    client_ip: str = Depends(brute_force_guard),
    guard: BruteForceProtection = Depends(get_brute_force_protection),
    db: Session = Depends(get_db)
):
    """
    Autentica pela senha e retorna um token JWT.

    - **password**: Senha

    O IP é bloqueado por 15 minutos após 5 falhas consecutivas.
    """
    password = body.password if body else None
    result = Authenticator(db, guard).login(password, client_ip, request)
    user = result.user
    return LoginResponse(
        success=True,
        token=result.token,
        user=PublicUser(id=user.id, name=user.name, role=user.role),
        message="Login realizado com sucesso",
    )


@router.get("/validate", response_model=ValidateResponse)
async def validate(auth: AuthContext = Depends(get_auth_context)):
    """
    Confirma que o token é válido e retorna a identidade contida nele.
    """
    return ValidateResponse(
        success=True,
        user=PublicUser(id=auth.user_id, name=auth.user_name, role=auth.role),
        message="Token válido",
    )


# ==================================================
# OPERAÇÃO (somente admin)
# ==================================================

@router.get("/login/attempts/stats")
async def login_attempts_stats(
    auth: AuthContext = Depends(require_admin),
    guard: BruteForceProtection = Depends(get_brute_force_protection),
):
    """Quantidade de IPs rastreados e bloqueados no ledger de login."""
    return {"success": True, "data": guard.get_stats()}


@router.delete("/login/attempts/{ip}")
async def unblock_ip(
    ip: str,
    auth: AuthContext = Depends(require_admin),
    guard: BruteForceProtection = Depends(get_brute_force_protection),
):
    """Remove o bloqueio e o histórico de falhas de um IP."""
    if not guard.unblock_ip(ip):
        raise NotFoundError("NOT_FOUND", "Nenhuma tentativa registrada para este IP")
    logger.info("IP desbloqueado por admin", ip=ip, admin_id=auth.user_id)
    return {"success": True, "message": f"IP {ip} desbloqueado"}
