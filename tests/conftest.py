# tests/conftest.py
"""
Configuração global do pytest para a API de Recortes.

Este arquivo é executado automaticamente pelo pytest antes dos testes.

Cada teste recebe um banco SQLite em memória próprio (StaticPool, para que
a sessão do teste e as sessões das rotas vejam a mesma conexão) e um
Cloudinary falso (FakeImageStorage) no lugar do SDK.
"""

import sys
import os

# Adiciona o diretório raiz do projeto ao PYTHONPATH
# para que os imports funcionem corretamente nos testes
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

# Configura variáveis de ambiente para testes
os.environ.setdefault("ENV", "test")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-tests")
os.environ.setdefault("ADMIN_PASSWORD", "admin123")
os.environ.setdefault("BCRYPT_ROUNDS", "4")


import cloudinary.exceptions
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from auth.models import User, ROLE_USER
from auth.security import create_access_token, get_password_hash
from auth.service import token_claims_for
from database.connection import Base, get_db
from database.init_db import ensure_admin
from main import app
from recortes.storage import CloudinaryStorage, get_image_storage

ADMIN_PASSWORD = "admin123"
CLOUDINARY_TEST_URL = "https://res.cloudinary.com/demo/image/upload/v1/recortes"


# ==================================================
# BANCO DE DADOS
# ==================================================

@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def admin_user(db):
    """Admin semeado como na inicialização da aplicação (senha admin123)."""
    return ensure_admin(db)


@pytest.fixture
def make_user(db):
    """Factory de usuários comuns já persistidos."""
    def _make(name, password, created_by=None, role=ROLE_USER):
        user = User(
            name=name,
            hashed_password=get_password_hash(password),
            role=role,
            created_by=created_by,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture
def auth_headers():
    """Gera o header Authorization para um usuário."""
    def _headers(user):
        token = create_access_token(token_claims_for(user))
        return {"Authorization": f"Bearer {token}"}
    return _headers


# ==================================================
# CLOUDINARY FALSO
# ==================================================

class FakeImageStorage(CloudinaryStorage):
    """
    CloudinaryStorage sem rede: troca as chamadas ao cloudinary.uploader
    por respostas fixas e guarda o que recebeu.
    """

    def __init__(self):
        super().__init__(cloud_name="demo", api_key="key", api_secret="secret", folder="recortes")
        self.calls = []
        self.fail_uploads = False

    def _upload_sync(self, content, file_name):
        self.calls.append(("upload", file_name))
        if self.fail_uploads:
            raise cloudinary.exceptions.Error("falha")
        name = f"img{len(self.calls)}"
        return {
            "public_id": f"recortes/{name}",
            "secure_url": f"{CLOUDINARY_TEST_URL}/{name}.png",
            "bytes": len(content),
        }

    def _destroy_sync(self, public_id):
        self.calls.append(("destroy", public_id))
        return {"result": "ok"}

    def actions(self):
        return [action for action, _ in self.calls]


@pytest.fixture
def image_storage():
    return FakeImageStorage()


# ==================================================
# APLICAÇÃO
# ==================================================

@pytest.fixture
def client(session_factory, image_storage):
    """TestClient com banco em memória e Cloudinary falso."""
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_image_storage] = lambda: image_storage
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
