# auth/policies.py
"""
Regras de autorização sobre usuários.

Funções puras: recebem o chamador (AuthContext) e o alvo (qualquer objeto
com id, role e created_by) e não tocam no banco.

Regras:
- Criar: qualquer usuário autenticado; o novo usuário é sempre 'user'.
- Atualizar: admin sempre; 'user' apenas a si mesmo ou usuários comuns que criou.
- Excluir: nunca um admin, nunca a si mesmo; admin pode excluir qualquer outro;
  'user' apenas usuários comuns que criou.
"""

from typing import Optional

from auth.models import ROLE_ADMIN, ROLE_USER
from auth.schemas import AuthContext
from utils.errors import ForbiddenError

CANNOT_DELETE_ADMIN = "CANNOT_DELETE_ADMIN"
CANNOT_DELETE_SELF = "CANNOT_DELETE_SELF"
INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"

_DENIAL_MESSAGES = {
    CANNOT_DELETE_ADMIN: "Não é possível deletar o administrador principal",
    CANNOT_DELETE_SELF: "Não é possível deletar sua própria conta",
    INSUFFICIENT_PERMISSIONS: "Sem permissão para deletar este usuário",
}


def _created_by_actor(actor: AuthContext, target) -> bool:
    return target.role == ROLE_USER and target.created_by == actor.user_id


def can_create_user(actor: Optional[AuthContext]) -> bool:
    return actor is not None


def can_update_user(actor: AuthContext, target) -> bool:
    if actor.role == ROLE_ADMIN:
        return True
    if actor.role == ROLE_USER:
        return actor.user_id == target.id or _created_by_actor(actor, target)
    return False


def delete_denial_reason(actor: AuthContext, target) -> Optional[str]:
    """
    Código do motivo da recusa de exclusão, ou None se permitido.

    A ordem das checagens define qual código aparece quando mais de uma
    regra se aplica.
    """
    if target.role == ROLE_ADMIN:
        return CANNOT_DELETE_ADMIN
    if actor.user_id == target.id:
        return CANNOT_DELETE_SELF
    if actor.role == ROLE_ADMIN:
        return None
    if actor.role == ROLE_USER and _created_by_actor(actor, target):
        return None
    return INSUFFICIENT_PERMISSIONS


def can_delete_user(actor: AuthContext, target) -> bool:
    return delete_denial_reason(actor, target) is None


def check_can_update_user(actor: AuthContext, target) -> None:
    """Lança ForbiddenError se o chamador não puder atualizar o alvo."""
    if not can_update_user(actor, target):
        raise ForbiddenError(INSUFFICIENT_PERMISSIONS, "Sem permissão para atualizar este usuário")


def check_can_delete_user(actor: AuthContext, target) -> None:
    """Lança ForbiddenError com o código do motivo se a exclusão for negada."""
    reason = delete_denial_reason(actor, target)
    if reason is not None:
        raise ForbiddenError(reason, _DENIAL_MESSAGES[reason])
