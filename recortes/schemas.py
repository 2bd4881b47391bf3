# recortes/schemas.py
"""
Schemas Pydantic do catálogo de recortes

Os campos são opcionais e sem restrição de tipo estrita para que a
validação devolva os códigos de erro do catálogo (MISSING_REQUIRED_FIELDS,
INVALID_ORDEM, ...) em vez de um erro genérico de schema.
"""

from typing import Any, List, Optional

from pydantic import BaseModel


class RecorteCreate(BaseModel):
    nome: Optional[str] = None
    ordem: Optional[Any] = None
    sku: Optional[str] = None
    tipoRecorte: Optional[str] = None
    posicao: Optional[str] = None
    tipoProduto: Optional[str] = None
    material: Optional[str] = None
    cor: Optional[str] = None
    urlImagem: Optional[str] = None
    status: Optional[bool] = None


class RecorteUpdate(RecorteCreate):
    """Mesmos campos; apenas os enviados são alterados"""


class RecorteOut(BaseModel):
    id: str
    nome: str
    ordem: int
    sku: str
    tipoRecorte: str
    posicao: str
    tipoProduto: str
    material: str
    cor: str
    urlImagem: str
    status: bool
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


class RecorteResponse(BaseModel):
    success: bool
    message: Optional[str] = None
    data: RecorteOut


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int
    hasNext: bool
    hasPrev: bool


class PaginatedRecortes(BaseModel):
    success: bool
    data: List[RecorteOut]
    pagination: Pagination


class UploadedImageData(BaseModel):
    imageUrl: str
    publicId: str
    fileName: str


class UploadImageResponse(BaseModel):
    success: bool
    message: str
    data: UploadedImageData


class RecorteDeleteResponse(BaseModel):
    success: bool
    message: str
