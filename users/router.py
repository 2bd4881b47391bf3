# users/router.py
"""
Endpoints de gestão de usuários

Qualquer usuário autenticado acessa; o que cada um pode alterar é decidido
em auth/policies.py.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from auth.dependencies import get_auth_context
from auth.schemas import AuthContext
from database.connection import get_db
from users.schemas import (
    MessageResponse, UserCreate, UserCreateResponse, UserDelete, UserListResponse, UserUpdate
)
from users.service import UserRegistryService

router = APIRouter(prefix="/users", tags=["Usuários"])


@router.post("", response_model=UserCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    request: Request,
    body: UserCreate,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db)
):
    """
    Cria um novo usuário.

    - O usuário criado tem sempre role **user**
    - O chamador fica registrado como criador
    - Nome e senha não podem repetir os de outro usuário
    """
    user = UserRegistryService(db, auth, request).create_user(body.name, body.password, body.description)
    return UserCreateResponse(success=True, userId=user.id, message="Usuário criado com sucesso")


@router.get("", response_model=UserListResponse)
async def list_users(
    request: Request,
    search: Optional[str] = None,
    sortBy: Optional[str] = None,
    sortOrder: Optional[str] = None,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db)
):
    """
    Lista usuários.

    - **search**: trecho do nome (sem diferenciar maiúsculas)
    - **sortBy**: role, name ou createdAt (padrão: role)
    - **sortOrder**: asc ou desc (padrão: desc)
    """
    return UserRegistryService(db, auth, request).list_users(search, sortBy, sortOrder)


@router.put("/update", response_model=MessageResponse)
async def update_user(
    request: Request,
    body: UserUpdate,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db)
):
    """
    Atualiza nome e/ou descrição de um usuário.

    **Acesso:** admin atualiza qualquer usuário; usuário comum atualiza a si
    mesmo e os usuários comuns que criou.
    """
    changes = body.model_dump(exclude_unset=True, exclude={"userId"})
    UserRegistryService(db, auth, request).update_user(body.userId, changes)
    return MessageResponse(success=True, message="Usuário atualizado com sucesso")


@router.delete("/delete", response_model=MessageResponse)
async def delete_user(
    request: Request,
    body: UserDelete,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db)
):
    """
    Remove um usuário.

    **Acesso:** nunca um admin nem a própria conta; admin remove qualquer
    outro usuário; usuário comum remove apenas os usuários comuns que criou.
    """
    UserRegistryService(db, auth, request).delete_user(body.userId)
    return MessageResponse(success=True, message="Usuário deletado com sucesso")
