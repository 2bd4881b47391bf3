# recortes/router.py
"""
Endpoints do catálogo de recortes

Todas as rotas exigem token válido. A imagem é enviada primeiro em
/recortes/upload e a URL devolvida é usada na criação.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from sqlalchemy.orm import Session

from auth.dependencies import get_auth_context
from auth.schemas import AuthContext
from database.connection import get_db
from recortes.constants import DEFAULT_PAGE_SIZE
from recortes.schemas import (
    PaginatedRecortes, RecorteCreate, RecorteResponse, RecorteUpdate,
    RecorteDeleteResponse, UploadedImageData, UploadImageResponse,
)
from recortes.service import RecorteService
from recortes.storage import CloudinaryStorage, get_image_storage

router = APIRouter(prefix="/recortes", tags=["Recortes"])


async def _read_upload(image: Optional[UploadFile]):
    if image is None:
        return None, None
    return await image.read(), image.content_type


@router.post("/upload", response_model=UploadImageResponse)
async def upload_image(
    request: Request,
    image: Optional[UploadFile] = File(None),
    tipoProduto: Optional[str] = Form(None),
    tipoRecorte: Optional[str] = Form(None),
    material: Optional[str] = Form(None),
    cor: Optional[str] = Form(None),
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
    storage: CloudinaryStorage = Depends(get_image_storage),
):
    """
    Envia a imagem de um recorte (máx. 5MB, apenas image/*).

    O nome do arquivo é montado a partir de tipoProduto, tipoRecorte,
    material e cor.
    """
    content, content_type = await _read_upload(image)
    uploaded = await RecorteService(db, auth, storage, request).upload_image(
        content, content_type, tipoProduto, tipoRecorte, material, cor
    )
    return UploadImageResponse(
        success=True,
        message="Imagem enviada com sucesso",
        data=UploadedImageData(
            imageUrl=uploaded.url,
            publicId=uploaded.public_id,
            fileName=uploaded.file_name,
        ),
    )


@router.post("", response_model=RecorteResponse, status_code=status.HTTP_201_CREATED)
async def create_recorte(
    request: Request,
    body: RecorteCreate,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    """Cria um recorte. urlImagem deve vir de /recortes/upload."""
    recorte = RecorteService(db, auth, request=request).create(body.model_dump())
    return RecorteResponse(success=True, message="Recorte criado com sucesso", data=recorte.to_dict())


@router.get("", response_model=PaginatedRecortes)
async def list_recortes(
    request: Request,
    page: Optional[str] = "1",
    limit: Optional[str] = str(DEFAULT_PAGE_SIZE),
    search: Optional[str] = None,
    sortBy: Optional[str] = None,
    sortOrder: Optional[str] = None,
    tipoRecorte: Optional[str] = None,
    tipoProduto: Optional[str] = None,
    material: Optional[str] = None,
    cor: Optional[str] = None,
    status: Optional[str] = None,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    """
    Lista recortes paginados.

    - **search**: trecho de nome, sku ou tipoRecorte
    - **sortBy**: ordem, nome ou createdAt (padrão: ordem)
    - **sortOrder**: asc ou desc (padrão: asc)
    - **status**: true ou false
    """
    return RecorteService(db, auth, request=request).list_recortes(
        page=page,
        limit=limit,
        search=search,
        sort_by=sortBy,
        sort_order=sortOrder,
        tipo_recorte=tipoRecorte,
        tipo_produto=tipoProduto,
        material=material,
        cor=cor,
        status=status,
    )


@router.get("/sku/{sku}", response_model=RecorteResponse)
async def get_recorte_by_sku(
    request: Request,
    sku: str,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    recorte = RecorteService(db, auth, request=request).get_by_sku(sku)
    return RecorteResponse(success=True, data=recorte.to_dict())


@router.get("/{recorte_id}", response_model=RecorteResponse)
async def get_recorte(
    request: Request,
    recorte_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    recorte = RecorteService(db, auth, request=request).get_by_id(recorte_id)
    return RecorteResponse(success=True, data=recorte.to_dict())


@router.put("/{recorte_id}", response_model=RecorteResponse)
async def update_recorte(
    request: Request,
    recorte_id: str,
    body: RecorteUpdate,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    """Atualiza apenas os campos enviados."""
    changes = body.model_dump(exclude_unset=True)
    recorte = RecorteService(db, auth, request=request).update(recorte_id, changes)
    return RecorteResponse(success=True, message="Recorte atualizado com sucesso", data=recorte.to_dict())


@router.put("/{recorte_id}/image", response_model=RecorteResponse)
async def update_recorte_image(
    request: Request,
    recorte_id: str,
    image: Optional[UploadFile] = File(None),
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
    storage: CloudinaryStorage = Depends(get_image_storage),
):
    """Substitui a imagem do recorte; a imagem anterior é removida."""
    content, content_type = await _read_upload(image)
    recorte = await RecorteService(db, auth, storage, request).update_image(recorte_id, content, content_type)
    return RecorteResponse(success=True, message="Imagem atualizada com sucesso", data=recorte.to_dict())


@router.delete("/{recorte_id}", response_model=RecorteDeleteResponse)
async def delete_recorte(
    request: Request,
    recorte_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
    storage: CloudinaryStorage = Depends(get_image_storage),
):
    await RecorteService(db, auth, storage, request).delete(recorte_id)
    return RecorteDeleteResponse(success=True, message="Recorte excluído com sucesso")
