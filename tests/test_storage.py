# tests/test_storage.py
"""
Testes da hospedagem de imagens (recortes/storage.py)

O SDK do Cloudinary é substituído por mocks: nenhum teste acessa a rede.
"""

import asyncio
from unittest.mock import patch

import cloudinary.exceptions
import pytest

from recortes.storage import (
    CloudinaryStorage,
    StorageError,
    build_image_name,
    public_id_from_url,
)

URL = "https://res.cloudinary.com/demo/image/upload/v1/recortes/foto.png"


def make_storage():
    return CloudinaryStorage(cloud_name="demo", api_key="key", api_secret="secret", folder="recortes")


class TestNomes:

    def test_nome_da_imagem(self):
        assert build_image_name("americano", "frente", "linho", "azul marinho") == \
            "americano_frente_linho_azul-marinho"

    def test_espacos_extras(self):
        assert build_image_name(" trucker ", "aba", "linho", "azul   marinho") == \
            "trucker_aba_linho_azul-marinho"

    def test_public_id_da_url(self):
        url = "https://res.cloudinary.com/demo/image/upload/v17/recortes/americano_aba_linho_laranja.png"
        assert public_id_from_url(url) == "recortes/americano_aba_linho_laranja"

    def test_public_id_url_vazia(self):
        assert public_id_from_url("") is None


# ==================================================
# UPLOAD
# ==================================================

class TestUpload:

    def test_nao_configurado(self):
        storage = CloudinaryStorage(cloud_name="", api_key="", api_secret="")
        assert storage.is_configured is False
        with patch("cloudinary.uploader.upload") as upload, pytest.raises(StorageError):
            asyncio.run(storage.upload(b"x", "nome", "image/png"))
        upload.assert_not_called()

    def test_upload(self):
        result = {
            "public_id": "recortes/americano_frente_linho_laranja",
            "secure_url": "https://res.cloudinary.com/demo/image/upload/v1/recortes/americano_frente_linho_laranja.png",
            "bytes": 1,
        }
        with patch("cloudinary.uploader.upload", return_value=result) as upload:
            uploaded = asyncio.run(make_storage().upload(b"x", "americano_frente_linho_laranja", "image/png"))

        assert uploaded.url == result["secure_url"]
        assert uploaded.public_id == "recortes/americano_frente_linho_laranja"
        assert uploaded.file_name == "americano_frente_linho_laranja"

        kwargs = upload.call_args.kwargs
        assert kwargs["folder"] == "recortes"
        assert kwargs["public_id"] == "americano_frente_linho_laranja"
        assert kwargs["overwrite"] is True
        assert kwargs["cloud_name"] == "demo"
        assert kwargs["api_key"] == "key"
        assert upload.call_args.args[0].read() == b"x"

    def test_erro_do_sdk_vira_storage_error(self):
        with patch("cloudinary.uploader.upload", side_effect=cloudinary.exceptions.Error("Invalid image file")):
            with pytest.raises(StorageError):
                asyncio.run(make_storage().upload(b"x", "nome", "image/png"))

    def test_falha_de_rede_vira_storage_error(self):
        with patch("cloudinary.uploader.upload", side_effect=ConnectionError("sem rede")):
            with pytest.raises(StorageError):
                asyncio.run(make_storage().upload(b"x", "nome", "image/png"))

    def test_resposta_sem_secure_url(self):
        with patch("cloudinary.uploader.upload", return_value={"public_id": "recortes/nome"}):
            with pytest.raises(StorageError):
                asyncio.run(make_storage().upload(b"x", "nome", "image/png"))


# ==================================================
# REMOÇÃO
# ==================================================

class TestRemocao:

    def test_delete_por_url(self):
        with patch("cloudinary.uploader.destroy", return_value={"result": "ok"}) as destroy:
            assert asyncio.run(make_storage().delete_by_url(URL)) is True

        assert destroy.call_args.args[0] == "recortes/foto"

    def test_imagem_inexistente(self):
        with patch("cloudinary.uploader.destroy", return_value={"result": "not found"}):
            assert asyncio.run(make_storage().delete_by_url(URL)) is False

    def test_delete_melhor_esforco(self):
        """Falha na remoção não propaga."""
        with patch("cloudinary.uploader.destroy", side_effect=cloudinary.exceptions.Error("falha")):
            assert asyncio.run(make_storage().delete_by_url(URL)) is False

    def test_url_vazia_nao_chama_sdk(self):
        with patch("cloudinary.uploader.destroy") as destroy:
            assert asyncio.run(make_storage().delete_by_url("")) is False
        destroy.assert_not_called()
