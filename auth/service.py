# auth/service.py
"""
Autenticação por senha.

O login recebe apenas a senha: ela é testada contra o hash de cada usuário,
na ordem do banco (created_at, id), e o primeiro que conferir é o usuário
autenticado. Toda chamada grava no ledger de força bruta.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from auth.models import User
from auth.security import create_access_token, find_matching_user
from utils.audit import log_login_failure, log_login_success
from utils.brute_force import BruteForceProtection
from utils.errors import AuthenticationError, InternalError, ValidationError
from utils.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class LoginResult:
    token: str
    user: User


def token_claims_for(user: User) -> dict:
    """Claims do token de sessão para um usuário."""
    return {"userId": user.id, "userName": user.name, "userRole": user.role}


class Authenticator:
    """Orquestra o login: verificação da senha, emissão do token e ledger."""

    def __init__(
        self,
        db: Session,
        guard: BruteForceProtection,
        token_ttl: Optional[timedelta] = None,
    ):
        self.db = db
        self.guard = guard
        self.token_ttl = token_ttl

    def _load_users(self):
        try:
            return self.db.query(User).order_by(User.created_at.asc(), User.id.asc()).all()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Erro ao carregar usuários no login", error=type(e).__name__)
            raise InternalError()

    def login(self, password: Optional[str], client_ip: str, request: Optional[Request] = None) -> LoginResult:
        """
        Autentica pela senha.

        Raises:
            ValidationError: MISSING_PASSWORD
            AuthenticationError: INVALID_PASSWORD
            InternalError: falha no banco
        """
        if not password:
            self.guard.record_failure(client_ip)
            log_login_failure(request, "missing_password")
            raise ValidationError("MISSING_PASSWORD", "Senha é obrigatória")

        users = self._load_users()
        user = find_matching_user(password, users)

        if user is None:
            self.guard.record_failure(client_ip)
            log_login_failure(request, "invalid_password")
            raise AuthenticationError("INVALID_PASSWORD", "Senha incorreta")

        token = create_access_token(token_claims_for(user), expires_delta=self.token_ttl)
        self.guard.record_success(client_ip)
        log_login_success(user.id, user.name, request)
        logger.info("Login realizado", user_id=user.id, role=user.role)

        return LoginResult(token=token, user=user)
