# auth/schemas.py
"""
Schemas Pydantic e contexto de autenticação
"""

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel

from auth.models import ROLE_ADMIN


# ==========================================
# Contexto da requisição autenticada
# ==========================================

@dataclass(frozen=True)
class AuthContext:
    """
    Identidade extraída de um token válido.

    Produzida por auth.dependencies.get_auth_context e passada explicitamente
    aos serviços. Os claims não são revalidados no banco: um usuário removido
    continua autenticado até o token expirar.
    """
    user_id: str
    user_name: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @classmethod
    def from_claims(cls, claims: dict) -> "AuthContext":
        return cls(
            user_id=claims["userId"],
            user_name=claims["userName"],
            role=claims["userRole"],
        )


# ==========================================
# Login
# ==========================================

class LoginRequest(BaseModel):
    """Request de login (apenas senha)"""
    password: Optional[str] = None


class PublicUser(BaseModel):
    """Dados públicos do usuário autenticado"""
    id: str
    name: str
    role: str


class LoginResponse(BaseModel):
    success: bool
    token: Optional[str] = None
    user: Optional[PublicUser] = None
    message: str


class ValidateResponse(BaseModel):
    success: bool
    user: PublicUser
    message: str
