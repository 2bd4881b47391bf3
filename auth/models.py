# auth/models.py
"""
Modelos de autenticação: usuários e ledger de tentativas de login
"""

import uuid

from sqlalchemy import Column, Integer, String, Text, DateTime
from database.connection import Base
from utils.timezone import now_utc

ROLE_ADMIN = "admin"
ROLE_USER = "user"


def generate_id() -> str:
    return uuid.uuid4().hex


class User(Base):
    """
    Usuário do sistema.

    Não existe username: o login é feito apenas pela senha, por isso duas
    contas nunca podem compartilhar a mesma senha em texto plano.
    created_by é referência fraca (sem FK) ao usuário que criou a conta.
    """

    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=generate_id)
    name = Column(String(100), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=ROLE_USER)  # 'admin' ou 'user'
    description = Column(Text, nullable=True)
    created_by = Column(String(32), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc, nullable=False)

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def __repr__(self):
        return f"<User(id={self.id}, name='{self.name}', role='{self.role}')>"


class LoginAttempt(Base):
    """Tentativas de login falhas por IP (ver utils/brute_force.py)."""

    __tablename__ = "login_attempts"

    id = Column(String(32), primary_key=True, default=generate_id)
    ip = Column(String(64), index=True, nullable=False)
    attempts = Column(Integer, nullable=False, default=0)
    blocked_at = Column(DateTime(timezone=True), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc, nullable=False)

    def __repr__(self):
        return f"<LoginAttempt(ip='{self.ip}', attempts={self.attempts}, blocked_at={self.blocked_at})>"
