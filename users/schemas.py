# users/schemas.py
"""
Schemas Pydantic da gestão de usuários
"""

from typing import List, Optional

from pydantic import BaseModel


class UserCreate(BaseModel):
    """Criação de usuário (role sempre 'user')"""
    name: Optional[str] = None
    password: Optional[str] = None
    description: Optional[str] = None


class UserUpdate(BaseModel):
    """Atualização de usuário; apenas campos enviados são alterados"""
    userId: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None


class UserDelete(BaseModel):
    userId: Optional[str] = None


class UserListItem(BaseModel):
    id: str
    name: str
    role: str
    description: Optional[str] = None
    createdAt: Optional[str] = None
    createdBy: Optional[str] = None
    creatorName: Optional[str] = None


class UserListFilters(BaseModel):
    search: Optional[str] = None
    sortBy: str
    sortOrder: str


class UserListResponse(BaseModel):
    success: bool
    users: List[UserListItem]
    total: int
    filters: UserListFilters
    message: str


class UserCreateResponse(BaseModel):
    success: bool
    userId: str
    message: str


class MessageResponse(BaseModel):
    success: bool
    message: str
