# config.py
# -*- coding: utf-8 -*-
"""
Configurações centralizadas da API de Recortes
"""

import os
import warnings
from pathlib import Path
from dotenv import load_dotenv

# Carrega variáveis de ambiente (apenas se existir .env)
load_dotenv()

ENV = os.getenv("ENV", "development")
IS_PRODUCTION = ENV == "production"

# ==================================================
# CONFIGURAÇÕES DO BANCO DE DADOS
# ==================================================
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./recortes.db")

# SQLAlchemy precisa de postgresql://
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

# ==================================================
# CONFIGURAÇÕES DE AUTENTICAÇÃO JWT
# ==================================================
# ATENÇÃO: Em produção, SEMPRE defina SECRET_KEY via variável de ambiente
SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    warnings.warn("SECRET_KEY não definida! Usando chave temporária. DEFINA EM PRODUÇÃO!", RuntimeWarning)
    SECRET_KEY = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"

ALGORITHM = os.getenv("ALGORITHM", "HS256")
JWT_EXPIRES_MINUTES = int(os.getenv("JWT_EXPIRES_MINUTES", str(7 * 24 * 60)))  # 7 dias

# Custo do bcrypt (12 rounds em produção)
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))
MIN_PASSWORD_LENGTH = int(os.getenv("MIN_PASSWORD_LENGTH", "4"))

# Admin inicial
ADMIN_NAME = os.getenv("ADMIN_NAME", "Administrador")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")
if not ADMIN_PASSWORD:
    warnings.warn("ADMIN_PASSWORD não definida! Usando senha padrão insegura.", RuntimeWarning)
    ADMIN_PASSWORD = "admin123"

# ==================================================
# PROTEÇÃO CONTRA FORÇA BRUTA
# ==================================================
LOGIN_ATTEMPTS_LIMIT = int(os.getenv("LOGIN_ATTEMPTS_LIMIT", "5"))
LOGIN_BLOCK_MINUTES = int(os.getenv("LOGIN_BLOCK_MINUTES", "15"))

# ==================================================
# CONFIGURAÇÕES DO CLOUDINARY (imagens dos recortes)
# ==================================================
CLOUDINARY_CLOUD_NAME = os.getenv("CLOUDINARY_CLOUD_NAME", "")
CLOUDINARY_API_KEY = os.getenv("CLOUDINARY_API_KEY", "")
CLOUDINARY_API_SECRET = os.getenv("CLOUDINARY_API_SECRET", "")
CLOUDINARY_FOLDER = os.getenv("CLOUDINARY_FOLDER", "recortes")
CLOUDINARY_TIMEOUT = float(os.getenv("CLOUDINARY_TIMEOUT", "30"))

MAX_IMAGE_SIZE = 5 * 1024 * 1024  # 5MB

# ==================================================
# OUTRAS CONFIGURAÇÕES
# ==================================================
BASE_DIR = Path(__file__).resolve().parent
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]


def validate_settings() -> list:
    """
    Verifica variáveis obrigatórias em produção.

    Returns:
        Lista de variáveis ausentes (vazia se tudo ok)

    Raises:
        RuntimeError: em produção, quando alguma variável obrigatória falta
    """
    missing = [
        name for name in ("DATABASE_URL", "SECRET_KEY", "ADMIN_PASSWORD")
        if not os.getenv(name)
    ]
    if missing and IS_PRODUCTION:
        raise RuntimeError(f"Variáveis de ambiente obrigatórias ausentes: {', '.join(missing)}")
    return missing
