# utils/brute_force.py
"""
SECURITY: Proteção contra ataques de força bruta no login.

Estado por IP, persistido na tabela login_attempts:

    CLEAN (sem registro)
      -> TRACKING (attempts < limite)
      -> BLOCKED (blocked_at definido, expires_at = agora + janela)
      -> (expires_at do bloqueio passou) -> CLEAN

Registro sem bloqueio não expira: as falhas continuam somando até o
limite ou até um login bem sucedido.

USO:
    guard = BruteForceProtection(db)

    status = guard.check(ip)          # antes de verificar credenciais
    if status.is_blocked:
        raise TooManyAttemptsError(...)

    guard.record_failure(ip)          # após login falho
    guard.record_success(ip)          # após login bem sucedido

Disponibilidade acima de bloqueio estrito: falhas do banco ao ler ou gravar
o ledger são logadas e a requisição segue como se o IP estivesse limpo.

Não há lock: duas falhas simultâneas do mesmo IP podem ler o mesmo contador
e gravar o mesmo valor, contando uma tentativa a menos. Isso é aceito.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from fastapi import Depends, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from auth.models import LoginAttempt
from config import LOGIN_ATTEMPTS_LIMIT, LOGIN_BLOCK_MINUTES
from database.connection import get_db
from utils.audit import get_client_ip, log_login_blocked
from utils.errors import TooManyAttemptsError
from utils.logging_config import get_logger
from utils.timezone import now_utc, ensure_utc

logger = get_logger(__name__)


@dataclass
class BruteForceConfig:
    """
    Configuração de proteção contra brute force.

    Attributes:
        max_attempts: Falhas consecutivas antes de bloquear (default: 5)
        block_minutes: Duração do bloqueio em minutos (default: 15)
    """
    max_attempts: int = LOGIN_ATTEMPTS_LIMIT
    block_minutes: int = LOGIN_BLOCK_MINUTES

    @property
    def block_window(self) -> timedelta:
        return timedelta(minutes=self.block_minutes)


@dataclass
class BruteForceStatus:
    """Resultado da checagem para um IP."""
    is_blocked: bool = False
    remaining_minutes: int = 0
    attempts: int = 0
    message: Optional[str] = None


class BruteForceProtection:
    """Contador de tentativas falhas por IP com janela de bloqueio."""

    def __init__(
        self,
        db: Session,
        config: Optional[BruteForceConfig] = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._db = db
        self._config = config or BruteForceConfig()
        self._clock = clock

    @property
    def config(self) -> BruteForceConfig:
        return self._config

    def _find(self, ip_address: str) -> Optional[LoginAttempt]:
        return (
            self._db.query(LoginAttempt)
            .filter(LoginAttempt.ip == ip_address)
            .order_by(LoginAttempt.updated_at.desc())
            .first()
        )

    def check(self, ip_address: str) -> BruteForceStatus:
        """
        Verifica se o IP pode tentar login agora.

        Bloqueio expirado é removido e o IP volta a CLEAN.
        """
        try:
            record = self._find(ip_address)
            if record is None:
                return BruteForceStatus()

            now = self._clock()
            expires_at = ensure_utc(record.expires_at)

            if record.blocked_at is not None and expires_at <= now:
                self._db.delete(record)
                self._db.commit()
                logger.info("[BruteForce] Bloqueio expirado removido", ip=ip_address)
                return BruteForceStatus()

            if record.blocked_at is not None:
                remaining = math.ceil((expires_at - now).total_seconds() / 60)
                return BruteForceStatus(
                    is_blocked=True,
                    remaining_minutes=remaining,
                    attempts=record.attempts,
                    message=(
                        "IP bloqueado devido a muitas tentativas de login. "
                        f"Tente novamente em {remaining} minutos."
                    ),
                )

            return BruteForceStatus(attempts=record.attempts)
        except SQLAlchemyError as e:
            self._db.rollback()
            logger.error("[BruteForce] Falha ao consultar tentativas; liberando requisição",
                         ip=ip_address, error=type(e).__name__)
            return BruteForceStatus()

    def record_failure(self, ip_address: str) -> None:
        """Registra uma falha; bloqueia o IP ao atingir o limite."""
        try:
            now = self._clock()
            record = self._find(ip_address)

            if record is None:
                record = LoginAttempt(
                    ip=ip_address,
                    attempts=1,
                    expires_at=now + self._config.block_window,
                    updated_at=now,
                )
                self._db.add(record)
            else:
                record.attempts += 1
                record.updated_at = now

            if record.attempts >= self._config.max_attempts:
                record.blocked_at = now
                record.expires_at = now + self._config.block_window
                logger.warning(
                    f"[BruteForce] IP {ip_address} bloqueado por {self._config.block_minutes} min "
                    f"após {record.attempts} tentativas",
                    ip=ip_address,
                    failures=record.attempts,
                )

            self._db.commit()
        except SQLAlchemyError as e:
            self._db.rollback()
            logger.error("[BruteForce] Falha ao registrar tentativa", ip=ip_address, error=type(e).__name__)

    def record_success(self, ip_address: str) -> None:
        """Login bem sucedido: apaga todo o histórico do IP."""
        try:
            self._db.query(LoginAttempt).filter(LoginAttempt.ip == ip_address).delete(
                synchronize_session=False
            )
            self._db.commit()
        except SQLAlchemyError as e:
            self._db.rollback()
            logger.error("[BruteForce] Falha ao limpar tentativas", ip=ip_address, error=type(e).__name__)

    def get_stats(self) -> dict:
        """Estatísticas do ledger."""
        now = self._clock()
        records = self._db.query(LoginAttempt).all()
        blocked = sum(
            1 for r in records
            if r.blocked_at is not None and ensure_utc(r.expires_at) > now
        )
        return {
            "tracked_ips": len(records),
            "blocked_ips": blocked,
            "config": {
                "max_attempts": self._config.max_attempts,
                "block_minutes": self._config.block_minutes,
            },
        }

    def unblock_ip(self, ip_address: str) -> bool:
        """Desbloqueia um IP manualmente."""
        deleted = self._db.query(LoginAttempt).filter(LoginAttempt.ip == ip_address).delete(
            synchronize_session=False
        )
        self._db.commit()
        if deleted:
            logger.info(f"[BruteForce] IP {ip_address} desbloqueado manualmente")
        return bool(deleted)


# ==================================================
# DEPENDENCIES
# ==================================================

def get_brute_force_config() -> BruteForceConfig:
    """Configuração ativa (sobrescrevível em testes via dependency_overrides)."""
    return BruteForceConfig()


def get_brute_force_protection(
    db: Session = Depends(get_db),
    config: BruteForceConfig = Depends(get_brute_force_config),
) -> BruteForceProtection:
    return BruteForceProtection(db, config)


async def brute_force_guard(
    request: Request,
    protection: BruteForceProtection = Depends(get_brute_force_protection),
) -> str:
    """
    Gate do endpoint de login.

    Devolve o IP do cliente para uso posterior; lança 429 TOO_MANY_ATTEMPTS
    se o IP estiver bloqueado.
    """
    client_ip = get_client_ip(request)
    status = protection.check(client_ip)
    if status.is_blocked:
        log_login_blocked(request, status.remaining_minutes)
        raise TooManyAttemptsError(
            "TOO_MANY_ATTEMPTS",
            status.message,
            remainingMinutes=status.remaining_minutes,
        )
    return client_ip


__all__ = [
    "BruteForceProtection",
    "BruteForceConfig",
    "BruteForceStatus",
    "get_brute_force_config",
    "get_brute_force_protection",
    "brute_force_guard",
]
