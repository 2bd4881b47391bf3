# recortes/storage.py
"""
Hospedagem das imagens dos recortes no Cloudinary (SDK oficial).

O SDK é síncrono: as chamadas rodam em threadpool para não travar o event loop.
"""

import io
import re
from dataclasses import dataclass
from typing import Optional

import cloudinary
import cloudinary.exceptions
import cloudinary.uploader
from starlette.concurrency import run_in_threadpool

from config import (
    CLOUDINARY_API_KEY,
    CLOUDINARY_API_SECRET,
    CLOUDINARY_CLOUD_NAME,
    CLOUDINARY_FOLDER,
    CLOUDINARY_TIMEOUT,
)
from utils.logging_config import get_logger

logger = get_logger(__name__)


class StorageError(Exception):
    """Falha ao enviar ou remover uma imagem."""


@dataclass
class UploadedImage:
    url: str
    public_id: str
    file_name: str


def build_image_name(tipo_produto: str, tipo_recorte: str, material: str, cor: str) -> str:
    """
    Nome da imagem a partir dos atributos do recorte.

    Ex.: ("americano", "frente", "linho", "azul marinho") -> "americano_frente_linho_azul-marinho"
    """
    parts = (tipo_produto, tipo_recorte, material, cor)
    return "_".join(re.sub(r"\s+", "-", p.strip()) for p in parts)


def public_id_from_url(url: str, folder: str = CLOUDINARY_FOLDER) -> Optional[str]:
    """Extrai o public_id ("pasta/nome") de uma URL de entrega do Cloudinary."""
    if not url:
        return None
    last_segment = url.rstrip("/").split("/")[-1]
    name = last_segment.split(".")[0]
    if not name:
        return None
    return f"{folder}/{name}"


class CloudinaryStorage:
    """Upload e remoção de imagens via cloudinary.uploader."""

    def __init__(
        self,
        cloud_name: str = CLOUDINARY_CLOUD_NAME,
        api_key: str = CLOUDINARY_API_KEY,
        api_secret: str = CLOUDINARY_API_SECRET,
        folder: str = CLOUDINARY_FOLDER,
        timeout: float = CLOUDINARY_TIMEOUT,
    ):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.folder = folder
        self.timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    def _credentials(self) -> dict:
        return {
            "cloud_name": self.cloud_name,
            "api_key": self.api_key,
            "api_secret": self.api_secret,
            "timeout": self.timeout,
        }

    def _upload_sync(self, content: bytes, file_name: str) -> dict:
        return cloudinary.uploader.upload(
            io.BytesIO(content),
            folder=self.folder,
            public_id=file_name,
            overwrite=True,
            resource_type="image",
            **self._credentials(),
        )

    def _destroy_sync(self, public_id: str) -> dict:
        return cloudinary.uploader.destroy(public_id, resource_type="image", **self._credentials())

    async def upload(self, content: bytes, file_name: str, content_type: str = "image/jpeg") -> UploadedImage:
        """
        Envia a imagem para <folder>/<file_name>, sobrescrevendo se já existir.

        Raises:
            StorageError: falha de configuração, rede ou resposta do Cloudinary
        """
        if not self.is_configured:
            raise StorageError("Cloudinary não configurado")

        try:
            result = await run_in_threadpool(self._upload_sync, content, file_name)
        except cloudinary.exceptions.Error as e:
            raise StorageError(f"Cloudinary recusou o upload: {e}") from e
        except OSError as e:
            raise StorageError(f"Falha de comunicação com o Cloudinary: {type(e).__name__}") from e

        url = (result or {}).get("secure_url")
        if not url:
            raise StorageError("Resposta do Cloudinary sem secure_url")

        logger.info("Imagem enviada", public_id=result.get("public_id"), bytes=result.get("bytes"),
                    content_type=content_type)
        return UploadedImage(
            url=url,
            public_id=result.get("public_id") or f"{self.folder}/{file_name}",
            file_name=file_name,
        )

    async def delete_by_url(self, url: str) -> bool:
        """
        Remove a imagem referenciada pela URL.

        Melhor esforço: falhas são logadas e retornam False.
        """
        public_id = public_id_from_url(url, self.folder)
        if not public_id or not self.is_configured:
            return False
        try:
            result = await run_in_threadpool(self._destroy_sync, public_id)
        except (cloudinary.exceptions.Error, OSError) as e:
            logger.warning("Erro ao excluir imagem do Cloudinary", public_id=public_id, error=str(e))
            return False
        return (result or {}).get("result") == "ok"


_storage: Optional[CloudinaryStorage] = None


def get_image_storage() -> CloudinaryStorage:
    """Dependency com a instância compartilhada (sobrescrevível em testes)."""
    global _storage
    if _storage is None:
        _storage = CloudinaryStorage()
        if not _storage.is_configured:
            logger.warning("Cloudinary não configurado: upload de imagens não funcionará")
    return _storage
