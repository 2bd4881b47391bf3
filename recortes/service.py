# recortes/service.py
"""
Regras do catálogo de recortes.

Qualquer usuário autenticado pode criar, alterar e excluir recortes; não há
distinção de dono. As invariantes são de dados:

- tipoRecorte, posicao, tipoProduto, material e cor pertencem aos valores aceitos
- ordem é inteiro >= 1 e único dentro do mesmo tipoProduto
- sku é único
- urlImagem não pode ser vazia (a imagem é enviada antes, via /upload)

As checagens de unicidade rodam antes da escrita e o banco tem unique
constraints equivalentes; a violação no banco é traduzida para o mesmo
código de conflito.
"""

import math
import re
from typing import Any, Optional

from fastapi import Request
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from auth.schemas import AuthContext
from config import MAX_IMAGE_SIZE
from database.connection import store_operation
from recortes.constants import (
    DEFAULT_PAGE_SIZE,
    ENUM_FIELDS,
    MAX_PAGE_SIZE,
    REQUIRED_FIELDS,
    SORT_FIELDS,
    SORT_ORDERS,
)
from recortes.models import API_TO_COLUMN, Recorte
from recortes.storage import CloudinaryStorage, StorageError, UploadedImage, build_image_name
from utils.audit import AuditEvent, log_recorte_event
from utils.errors import ConflictError, InternalError, NotFoundError, ValidationError
from utils.logging_config import get_logger

logger = get_logger(__name__)

ID_PATTERN = re.compile(r"^[0-9a-fA-F]{32}$")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_ordem(value: Any) -> int:
    """
    Converte e valida a ordem (inteiro >= 1).

    Aceita 3 e 3.0; rejeita booleanos, frações e strings.
    """
    if isinstance(value, bool):
        ordem = None
    elif isinstance(value, int):
        ordem = value
    elif isinstance(value, float) and value.is_integer():
        ordem = int(value)
    else:
        ordem = None

    if ordem is None or ordem < 1:
        raise ValidationError("INVALID_ORDEM", "Ordem deve ser um número inteiro positivo")
    return ordem


def validate_enum(field: str, value: str) -> None:
    accepted, code, label = ENUM_FIELDS[field]
    if value not in accepted:
        raise ValidationError(code, f"{label}. Valores aceitos: {', '.join(accepted)}")


def _sku_conflict(sku: str) -> ConflictError:
    return ConflictError("SKU_EXISTS", "SKU já existe", existingSku=sku)


def _ordem_conflict(ordem: int, tipo_produto: str) -> ConflictError:
    return ConflictError(
        "ORDEM_EXISTS",
        f'Ordem {ordem} já está sendo usada para o tipo de produto "{tipo_produto}"',
        conflictingOrder=ordem,
        conflictingProduct=tipo_produto,
    )


def _conflict_from_integrity(exc: IntegrityError, sku: str, ordem: int, tipo_produto: str) -> ConflictError:
    """Traduz violação de unique constraint para o erro de conflito correspondente."""
    detail = str(exc.orig).lower()
    if "sku" in detail:
        return _sku_conflict(sku)
    if "ordem" in detail:
        return _ordem_conflict(ordem, tipo_produto)
    return ConflictError("UNIQUE_CONSTRAINT_ERROR", "Violação de restrição única no banco de dados")


class RecorteService:
    """Operações sobre o catálogo em nome de um chamador autenticado."""

    def __init__(
        self,
        db: Session,
        actor: AuthContext,
        storage: Optional[CloudinaryStorage] = None,
        request: Optional[Request] = None,
    ):
        self.db = db
        self.actor = actor
        self.storage = storage
        self.request = request

    # ------------------------------------------------------------------
    # consultas
    # ------------------------------------------------------------------

    def _sku_taken(self, sku: str, exclude_id: Optional[str] = None) -> bool:
        with store_operation(self.db, "verificar sku"):
            query = self.db.query(Recorte.id).filter(Recorte.sku == sku)
            if exclude_id:
                query = query.filter(Recorte.id != exclude_id)
            return query.first() is not None

    def _ordem_taken(self, tipo_produto: str, ordem: int, exclude_id: Optional[str] = None) -> bool:
        with store_operation(self.db, "verificar ordem"):
            query = self.db.query(Recorte.id).filter(
                Recorte.tipo_produto == tipo_produto,
                Recorte.ordem == ordem,
            )
            if exclude_id:
                query = query.filter(Recorte.id != exclude_id)
            return query.first() is not None

    def get_by_id(self, recorte_id: str, validate_format: bool = True) -> Recorte:
        """
        Raises:
            ValidationError: INVALID_ID_FORMAT
            NotFoundError: NOT_FOUND
        """
        if validate_format and not ID_PATTERN.match(recorte_id or ""):
            raise ValidationError(
                "INVALID_ID_FORMAT",
                "ID inválido. Deve conter 32 caracteres hexadecimais"
            )
        with store_operation(self.db, "buscar recorte"):
            recorte = self.db.query(Recorte).filter(Recorte.id == recorte_id).first()
        if recorte is None:
            raise NotFoundError("NOT_FOUND", "Recorte não encontrado para o ID informado")
        return recorte

    def get_by_sku(self, sku: str) -> Recorte:
        if _is_blank(sku):
            raise ValidationError("SKU_REQUIRED", "SKU é obrigatório")
        with store_operation(self.db, "buscar recorte por sku"):
            recorte = self.db.query(Recorte).filter(Recorte.sku == sku).first()
        if recorte is None:
            raise NotFoundError("NOT_FOUND", "Recorte não encontrado para o SKU informado")
        return recorte

    def list_recortes(
        self,
        page: Any = 1,
        limit: Any = DEFAULT_PAGE_SIZE,
        search: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        tipo_recorte: Optional[str] = None,
        tipo_produto: Optional[str] = None,
        material: Optional[str] = None,
        cor: Optional[str] = None,
        status: Any = None,
    ) -> dict:
        """Lista paginada com busca textual, filtros exatos e ordenação."""
        try:
            page = max(int(page), 1)
        except (TypeError, ValueError):
            page = 1
        try:
            limit = min(max(int(limit), 1), MAX_PAGE_SIZE)
        except (TypeError, ValueError):
            limit = DEFAULT_PAGE_SIZE

        sort_by = sort_by if sort_by in SORT_FIELDS else "ordem"
        sort_order = sort_order if sort_order in SORT_ORDERS else "asc"
        column = getattr(Recorte, API_TO_COLUMN[sort_by])
        order = column.asc() if sort_order == "asc" else column.desc()

        filters = []
        if search and search.strip():
            term = search.strip().lower()
            filters.append(or_(
                func.lower(Recorte.nome).contains(term, autoescape=True),
                func.lower(Recorte.sku).contains(term, autoescape=True),
                func.lower(Recorte.tipo_recorte).contains(term, autoescape=True),
            ))
        if tipo_recorte:
            filters.append(Recorte.tipo_recorte == tipo_recorte)
        if tipo_produto:
            filters.append(Recorte.tipo_produto == tipo_produto)
        if material:
            filters.append(Recorte.material == material)
        if cor:
            filters.append(Recorte.cor == cor)
        if status is not None and status != "":
            if isinstance(status, str):
                filters.append(Recorte.status == (status.lower() == "true"))
            else:
                filters.append(Recorte.status == bool(status))

        with store_operation(self.db, "listar recortes"):
            query = self.db.query(Recorte).filter(*filters)
            total = query.count()
            recortes = (
                query.order_by(order, Recorte.id.asc())
                .offset((page - 1) * limit)
                .limit(limit)
                .all()
            )

        total_pages = math.ceil(total / limit) if total else 0
        return {
            "success": True,
            "data": [r.to_dict() for r in recortes],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "totalPages": total_pages,
                "hasNext": page < total_pages,
                "hasPrev": page > 1,
            },
        }

    # ------------------------------------------------------------------
    # escrita
    # ------------------------------------------------------------------

    def create(self, data: dict) -> Recorte:
        """
        Cria um recorte (ativo por padrão).

        Raises:
            ValidationError: MISSING_REQUIRED_FIELDS, SKU_REQUIRED, IMAGE_REQUIRED,
                INVALID_<CAMPO>, INVALID_ORDEM
            ConflictError: SKU_EXISTS, ORDEM_EXISTS, UNIQUE_CONSTRAINT_ERROR
        """
        # SKU só com espaços tem código próprio (SKU_REQUIRED)
        missing = [
            f for f in REQUIRED_FIELDS
            if data.get(f) in (None, "") or (f != "sku" and _is_blank(data.get(f)))
        ]
        if missing:
            raise ValidationError(
                "MISSING_REQUIRED_FIELDS",
                f"Campos obrigatórios não informados: {', '.join(missing)}",
                missingFields=missing,
            )

        sku = data["sku"].strip() if isinstance(data["sku"], str) else data["sku"]
        if _is_blank(sku):
            raise ValidationError("SKU_REQUIRED", "SKU é obrigatório e não pode estar vazio")

        if _is_blank(data.get("urlImagem")):
            raise ValidationError(
                "IMAGE_REQUIRED",
                "URL da imagem é obrigatória. Faça upload da imagem primeiro usando o endpoint /upload"
            )

        for field in ENUM_FIELDS:
            validate_enum(field, data[field])

        ordem = parse_ordem(data["ordem"])
        tipo_produto = data["tipoProduto"]

        if self._sku_taken(sku):
            raise _sku_conflict(sku)
        if self._ordem_taken(tipo_produto, ordem):
            raise _ordem_conflict(ordem, tipo_produto)

        status = data.get("status")
        recorte = Recorte(
            nome=data["nome"],
            ordem=ordem,
            sku=sku,
            tipo_recorte=data["tipoRecorte"],
            posicao=data["posicao"],
            tipo_produto=tipo_produto,
            material=data["material"],
            cor=data["cor"],
            url_imagem=data["urlImagem"].strip(),
            status=True if status is None else bool(status),
        )
        try:
            with store_operation(self.db, "criar recorte"):
                self.db.add(recorte)
                self.db.commit()
                self.db.refresh(recorte)
        except IntegrityError as e:
            raise _conflict_from_integrity(e, sku, ordem, tipo_produto)

        log_recorte_event(AuditEvent.RECORTE_CREATED, recorte.id, recorte.sku, self.actor.user_id, self.request)
        return recorte

    def update(self, recorte_id: str, changes: dict) -> Recorte:
        """
        Atualiza os campos enviados, revalidando cada um.

        Mudança de ordem ou de tipoProduto revalida a unicidade do par
        (tipoProduto, ordem), excluindo o próprio recorte.
        """
        recorte = self.get_by_id(recorte_id)
        changes = {k: v for k, v in changes.items() if k in API_TO_COLUMN and k != "createdAt"}

        if "nome" in changes and _is_blank(changes["nome"]):
            raise ValidationError("MISSING_REQUIRED_FIELDS", "Campos obrigatórios não informados: nome",
                                  missingFields=["nome"])
        if "urlImagem" in changes and _is_blank(changes["urlImagem"]):
            raise ValidationError("IMAGE_REQUIRED", "URL da imagem não pode ser vazia")
        if "status" in changes and changes["status"] is None:
            del changes["status"]

        for field in ENUM_FIELDS:
            if field in changes:
                validate_enum(field, changes[field])

        if "sku" in changes:
            sku = changes["sku"].strip() if isinstance(changes["sku"], str) else changes["sku"]
            if _is_blank(sku):
                raise ValidationError("SKU_REQUIRED", "SKU é obrigatório e não pode estar vazio")
            changes["sku"] = sku
            if sku != recorte.sku and self._sku_taken(sku, exclude_id=recorte.id):
                raise ConflictError(
                    "SKU_EXISTS", "SKU já está sendo usado por outro recorte", existingSku=sku
                )

        if "ordem" in changes:
            changes["ordem"] = parse_ordem(changes["ordem"])

        new_ordem = changes.get("ordem", recorte.ordem)
        new_tipo_produto = changes.get("tipoProduto", recorte.tipo_produto)
        if (new_ordem, new_tipo_produto) != (recorte.ordem, recorte.tipo_produto):
            if self._ordem_taken(new_tipo_produto, new_ordem, exclude_id=recorte.id):
                raise _ordem_conflict(new_ordem, new_tipo_produto)

        for field, value in changes.items():
            setattr(recorte, API_TO_COLUMN[field], value)

        try:
            with store_operation(self.db, "atualizar recorte"):
                self.db.commit()
                self.db.refresh(recorte)
        except IntegrityError as e:
            raise _conflict_from_integrity(e, changes.get("sku", ""), new_ordem, new_tipo_produto)

        log_recorte_event(AuditEvent.RECORTE_UPDATED, recorte.id, recorte.sku, self.actor.user_id, self.request)
        return recorte

    # ------------------------------------------------------------------
    # imagens
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_image(content: Optional[bytes], content_type: Optional[str]) -> None:
        if not content:
            raise ValidationError("NO_FILE", "Nenhuma imagem foi enviada")
        if not content_type or not content_type.startswith("image/"):
            raise ValidationError("INVALID_FILE_TYPE", "Apenas arquivos de imagem são permitidos")
        if len(content) > MAX_IMAGE_SIZE:
            raise ValidationError(
                "FILE_TOO_LARGE",
                f"Arquivo muito grande. Tamanho máximo: {MAX_IMAGE_SIZE // (1024 * 1024)}MB"
            )

    async def _upload(self, content: bytes, file_name: str, content_type: str) -> UploadedImage:
        try:
            return await self.storage.upload(content, file_name, content_type)
        except StorageError as e:
            logger.error("Erro no upload da imagem", file_name=file_name, error=str(e))
            raise InternalError("UPLOAD_ERROR", "Erro ao enviar a imagem")

    async def upload_image(
        self,
        content: Optional[bytes],
        content_type: Optional[str],
        tipo_produto: Optional[str],
        tipo_recorte: Optional[str],
        material: Optional[str],
        cor: Optional[str],
    ) -> UploadedImage:
        """Envia a imagem antes da criação do recorte e devolve a URL hospedada."""
        self._validate_image(content, content_type)
        if any(_is_blank(v) for v in (tipo_produto, tipo_recorte, material, cor)):
            raise ValidationError(
                "MISSING_FIELDS",
                "Campos obrigatórios: tipoProduto, tipoRecorte, material, cor"
            )
        file_name = build_image_name(tipo_produto, tipo_recorte, material, cor)
        return await self._upload(content, file_name, content_type)

    async def update_image(self, recorte_id: str, content: Optional[bytes], content_type: Optional[str]) -> Recorte:
        """Substitui a imagem; a anterior é removida do Cloudinary (melhor esforço)."""
        self._validate_image(content, content_type)
        recorte = self.get_by_id(recorte_id)

        if recorte.url_imagem:
            await self.storage.delete_by_url(recorte.url_imagem)

        file_name = build_image_name(recorte.tipo_produto, recorte.tipo_recorte, recorte.material, recorte.cor)
        uploaded = await self._upload(content, file_name, content_type)

        recorte.url_imagem = uploaded.url
        with store_operation(self.db, "atualizar imagem"):
            self.db.commit()
            self.db.refresh(recorte)

        log_recorte_event(AuditEvent.RECORTE_UPDATED, recorte.id, recorte.sku, self.actor.user_id, self.request)
        return recorte

    async def delete(self, recorte_id: str) -> None:
        """Exclui o recorte e, em melhor esforço, a imagem hospedada."""
        recorte = self.get_by_id(recorte_id)
        recorte_id, sku, url = recorte.id, recorte.sku, recorte.url_imagem

        if url and self.storage is not None:
            await self.storage.delete_by_url(url)

        with store_operation(self.db, "excluir recorte"):
            self.db.delete(recorte)
            self.db.commit()

        log_recorte_event(AuditEvent.RECORTE_DELETED, recorte_id, sku, self.actor.user_id, self.request)
