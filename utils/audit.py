# utils/audit.py
"""
SECURITY: Audit logging de eventos de segurança.

Eventos registrados:
- AUTH_LOGIN_SUCCESS/FAILURE/BLOCKED: tentativas de login
- USER_CREATED/UPDATED/DELETED: gestão de usuários
- RECORTE_CREATED/UPDATED/DELETED: alterações no catálogo
- ACCESS_DENIED: token inválido ou permissão insuficiente

Os eventos vão para o logger "security.audit" (structlog), com dados
sensíveis mascarados.
"""

from enum import Enum
from typing import Any, Dict, Optional

from fastapi import Request

from utils.logging_config import get_logger

audit_logger = get_logger("security.audit")

SENSITIVE_KEYS = {
    "password", "senha", "secret", "token", "api_key", "apikey",
    "authorization", "credential", "hashed_password",
}


class AuditEvent(str, Enum):
    """Tipos de eventos de auditoria"""
    AUTH_LOGIN_SUCCESS = "AUTH_LOGIN_SUCCESS"
    AUTH_LOGIN_FAILURE = "AUTH_LOGIN_FAILURE"
    AUTH_LOGIN_BLOCKED = "AUTH_LOGIN_BLOCKED"

    USER_CREATED = "USER_CREATED"
    USER_UPDATED = "USER_UPDATED"
    USER_DELETED = "USER_DELETED"

    RECORTE_CREATED = "RECORTE_CREATED"
    RECORTE_UPDATED = "RECORTE_UPDATED"
    RECORTE_DELETED = "RECORTE_DELETED"

    ACCESS_DENIED = "ACCESS_DENIED"


def get_client_ip(request: Optional[Request]) -> str:
    """
    SECURITY: Extrai IP real do cliente considerando proxies.

    Prioridade: X-Forwarded-For (primeiro IP), X-Real-IP, conexão direta.
    """
    if not request:
        return "unknown"

    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("X-Real-IP")
    if real_ip and real_ip.strip():
        return real_ip.strip()

    if request.client:
        return request.client.host

    return "unknown"


def mask_sensitive_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """SECURITY: Mascara dados sensíveis antes de logar."""
    masked = {}
    for key, value in data.items():
        key_lower = key.lower()
        if any(s in key_lower for s in SENSITIVE_KEYS):
            masked[key] = "***MASKED***"
        elif isinstance(value, dict):
            masked[key] = mask_sensitive_data(value)
        elif isinstance(value, str) and len(value) > 100:
            masked[key] = value[:100] + "...[truncated]"
        else:
            masked[key] = value
    return masked


def log_audit_event(
    event: AuditEvent,
    user_id: Optional[str] = None,
    username: Optional[str] = None,
    request: Optional[Request] = None,
    details: Optional[Dict[str, Any]] = None,
    success: bool = True,
    severity: str = "INFO"
):
    """
    SECURITY: Registra evento de auditoria.

    Args:
        event: Tipo do evento
        user_id: ID do usuário envolvido (se aplicável)
        username: Nome do usuário (se aplicável)
        request: Request do FastAPI (IP, path, método)
        details: Detalhes adicionais (mascarados)
        success: Se a ação foi bem sucedida
        severity: INFO, WARNING, ERROR ou CRITICAL
    """
    record = {
        "audit_event": event.value,
        "success": success,
        "user_id": user_id,
        "username": username,
        "ip_address": get_client_ip(request),
        "path": str(request.url.path) if request else None,
        "method": request.method if request else None,
    }
    if details:
        record["details"] = mask_sensitive_data(details)

    log = getattr(audit_logger, severity.lower(), audit_logger.info)
    log("audit", **record)


# ============================================
# Funções de conveniência
# ============================================

def log_login_success(user_id: str, username: str, request: Optional[Request]):
    log_audit_event(AuditEvent.AUTH_LOGIN_SUCCESS, user_id=user_id, username=username, request=request)


def log_login_failure(request: Optional[Request], reason: str = "invalid_password"):
    # Não há username no login: só a senha é enviada
    log_audit_event(
        AuditEvent.AUTH_LOGIN_FAILURE,
        request=request,
        details={"reason": reason},
        success=False,
        severity="WARNING"
    )


def log_login_blocked(request: Optional[Request], remaining_minutes: int):
    log_audit_event(
        AuditEvent.AUTH_LOGIN_BLOCKED,
        request=request,
        details={"remaining_minutes": remaining_minutes},
        success=False,
        severity="WARNING"
    )


def log_user_created(created_user_id: str, created_name: str, created_by: str, request: Optional[Request]):
    log_audit_event(
        AuditEvent.USER_CREATED,
        user_id=created_user_id,
        username=created_name,
        request=request,
        details={"created_by": created_by}
    )


def log_user_updated(user_id: str, username: str, updated_by: str, fields: list, request: Optional[Request]):
    log_audit_event(
        AuditEvent.USER_UPDATED,
        user_id=user_id,
        username=username,
        request=request,
        details={"updated_by": updated_by, "fields": fields}
    )


def log_user_deleted(deleted_user_id: str, deleted_name: str, deleted_by: str, request: Optional[Request]):
    log_audit_event(
        AuditEvent.USER_DELETED,
        user_id=deleted_user_id,
        username=deleted_name,
        request=request,
        details={"deleted_by": deleted_by},
        severity="WARNING"
    )


def log_access_denied(user_id: Optional[str], username: Optional[str], request: Optional[Request], reason: str):
    log_audit_event(
        AuditEvent.ACCESS_DENIED,
        user_id=user_id,
        username=username,
        request=request,
        details={"reason": reason},
        success=False,
        severity="WARNING"
    )


def log_recorte_event(event: AuditEvent, recorte_id: str, sku: str, user_id: str, request: Optional[Request]):
    log_audit_event(
        event,
        user_id=user_id,
        request=request,
        details={"recorte_id": recorte_id, "sku": sku}
    )


__all__ = [
    "AuditEvent",
    "get_client_ip",
    "mask_sensitive_data",
    "log_audit_event",
    "log_login_success",
    "log_login_failure",
    "log_login_blocked",
    "log_user_created",
    "log_user_updated",
    "log_user_deleted",
    "log_access_denied",
    "log_recorte_event",
]
