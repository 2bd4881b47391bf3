# users/service.py
"""
Gestão de usuários com as regras de autorização de auth/policies.py.

Unicidade de nome e de senha é checada antes da escrita (ler-depois-gravar,
sem lock). O nome também tem unique constraint no banco e a violação vira
USER_NAME_EXISTS; a unicidade de senha não tem equivalente no banco (o hash
é salgado), então duas criações simultâneas com a mesma senha podem passar.
"""

from typing import Optional

from fastapi import Request
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from auth.models import User, ROLE_USER
from auth.policies import check_can_delete_user, check_can_update_user
from auth.schemas import AuthContext
from auth.security import find_matching_user, get_password_hash
from config import MIN_PASSWORD_LENGTH
from database.connection import store_operation
from utils.audit import log_access_denied, log_user_created, log_user_deleted, log_user_updated
from utils.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from utils.logging_config import get_logger
from utils.timezone import to_iso

logger = get_logger(__name__)

SORT_FIELDS = ("role", "name", "createdAt")
SORT_ORDERS = ("asc", "desc")
DEFAULT_SORT_BY = "role"
DEFAULT_SORT_ORDER = "desc"

# Nome exibido quando o criador não existe mais
SYSTEM_CREATOR_NAME = "Sistema"


def _name_conflict() -> ConflictError:
    return ConflictError("USER_NAME_EXISTS", "Já existe um usuário com este nome")


class UserRegistryService:
    """Operações de CRUD sobre usuários em nome de um chamador autenticado."""

    def __init__(self, db: Session, actor: AuthContext, request: Optional[Request] = None):
        self.db = db
        self.actor = actor
        self.request = request

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    def _get_user(self, user_id: str) -> User:
        with store_operation(self.db, "buscar usuário"):
            user = self.db.query(User).filter(User.id == user_id).first()
        if user is None:
            raise NotFoundError("USER_NOT_FOUND", "Usuário não encontrado")
        return user

    def _name_taken(self, name: str, exclude_id: Optional[str] = None) -> bool:
        with store_operation(self.db, "verificar nome"):
            query = self.db.query(User.id).filter(User.name == name)
            if exclude_id:
                query = query.filter(User.id != exclude_id)
            return query.first() is not None

    def _password_taken(self, password: str) -> bool:
        with store_operation(self.db, "verificar senha"):
            users = self.db.query(User).order_by(User.created_at.asc(), User.id.asc()).all()
        return find_matching_user(password, users) is not None

    def _deny(self, exc: ForbiddenError, target_id: str):
        log_access_denied(self.actor.user_id, self.actor.user_name, self.request,
                          f"{exc.code}:{target_id}")
        raise exc

    # ------------------------------------------------------------------
    # operações
    # ------------------------------------------------------------------

    def create_user(self, name: Optional[str], password: Optional[str], description: Optional[str] = None) -> User:
        """
        Cria um usuário comum, registrando o chamador como criador.

        Raises:
            ValidationError: MISSING_REQUIRED_FIELDS, PASSWORD_TOO_SHORT
            ConflictError: USER_NAME_EXISTS, PASSWORD_ALREADY_EXISTS
        """
        name = name.strip() if name else name
        if not name or not password:
            raise ValidationError("MISSING_REQUIRED_FIELDS", "Nome e senha são obrigatórios")

        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                "PASSWORD_TOO_SHORT",
                f"Senha deve ter pelo menos {MIN_PASSWORD_LENGTH} caracteres"
            )

        if self._name_taken(name):
            raise _name_conflict()

        if self._password_taken(password):
            raise ConflictError(
                "PASSWORD_ALREADY_EXISTS",
                "Esta senha já está sendo usada por outro usuário"
            )

        user = User(
            name=name,
            hashed_password=get_password_hash(password),
            role=ROLE_USER,
            description=description or None,
            created_by=self.actor.user_id,
        )
        try:
            with store_operation(self.db, "criar usuário"):
                self.db.add(user)
                self.db.commit()
                self.db.refresh(user)
        except IntegrityError:
            raise _name_conflict()

        log_user_created(user.id, user.name, self.actor.user_id, self.request)
        return user

    def list_users(
        self,
        search: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
    ) -> dict:
        """
        Lista usuários com busca por nome e ordenação.

        Valores de ordenação inválidos caem no padrão (role, desc).
        Critérios secundários: role -> name asc; name -> role desc;
        createdAt -> name asc.
        """
        final_sort_by = sort_by if sort_by in SORT_FIELDS else DEFAULT_SORT_BY
        final_sort_order = sort_order if sort_order in SORT_ORDERS else DEFAULT_SORT_ORDER
        direction = (lambda col: col.asc()) if final_sort_order == "asc" else (lambda col: col.desc())

        if final_sort_by == "role":
            order_by = [direction(User.role), User.name.asc()]
        elif final_sort_by == "name":
            order_by = [direction(User.name), User.role.desc()]
        else:
            order_by = [direction(User.created_at), User.name.asc()]

        search_term = search.strip() if search else ""

        with store_operation(self.db, "listar usuários"):
            query = self.db.query(User)
            if search_term:
                query = query.filter(func.lower(User.name).contains(search_term.lower(), autoescape=True))
            users = query.order_by(*order_by).all()

            creator_ids = {u.created_by for u in users if u.created_by}
            creators = {}
            if creator_ids:
                creators = dict(
                    self.db.query(User.id, User.name).filter(User.id.in_(creator_ids)).all()
                )

        items = [
            {
                "id": u.id,
                "name": u.name,
                "role": u.role,
                "description": u.description,
                "createdAt": to_iso(u.created_at),
                "createdBy": u.created_by,
                "creatorName": creators.get(u.created_by, SYSTEM_CREATOR_NAME) if u.created_by else None,
            }
            for u in users
        ]

        if search_term:
            message = f'{len(items)} usuário(s) encontrado(s) para "{search_term}"'
        else:
            message = "Usuários listados com sucesso"

        return {
            "success": True,
            "users": items,
            "total": len(items),
            "filters": {
                "search": search_term or None,
                "sortBy": final_sort_by,
                "sortOrder": final_sort_order,
            },
            "message": message,
        }

    def update_user(self, user_id: Optional[str], changes: dict) -> User:
        """
        Atualiza nome e/ou descrição.

        Args:
            user_id: ID do alvo
            changes: apenas os campos enviados ("name", "description")

        Raises:
            ValidationError: MISSING_USER_ID
            NotFoundError: USER_NOT_FOUND
            ForbiddenError: INSUFFICIENT_PERMISSIONS
            ConflictError: USER_NAME_EXISTS
        """
        if not user_id:
            raise ValidationError("MISSING_USER_ID", "ID do usuário é obrigatório")

        user = self._get_user(user_id)

        try:
            check_can_update_user(self.actor, user)
        except ForbiddenError as exc:
            self._deny(exc, user.id)

        name = changes.get("name")
        name = name.strip() if name else None
        if name and name != user.name and self._name_taken(name, exclude_id=user.id):
            raise _name_conflict()

        updated_fields = []
        if name:
            user.name = name
            updated_fields.append("name")
        if "description" in changes:
            user.description = changes["description"]
            updated_fields.append("description")

        try:
            with store_operation(self.db, "atualizar usuário"):
                self.db.commit()
        except IntegrityError:
            raise _name_conflict()

        log_user_updated(user.id, user.name, self.actor.user_id, updated_fields, self.request)
        return user

    def delete_user(self, user_id: Optional[str]) -> None:
        """
        Remove um usuário.

        Raises:
            ValidationError: MISSING_USER_ID
            NotFoundError: USER_NOT_FOUND
            ForbiddenError: CANNOT_DELETE_ADMIN, CANNOT_DELETE_SELF, INSUFFICIENT_PERMISSIONS
        """
        if not user_id:
            raise ValidationError("MISSING_USER_ID", "ID do usuário é obrigatório")

        user = self._get_user(user_id)

        try:
            check_can_delete_user(self.actor, user)
        except ForbiddenError as exc:
            self._deny(exc, user.id)

        deleted_id, deleted_name = user.id, user.name
        with store_operation(self.db, "deletar usuário"):
            self.db.delete(user)
            self.db.commit()

        log_user_deleted(deleted_id, deleted_name, self.actor.user_id, self.request)
