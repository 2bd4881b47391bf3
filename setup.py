"""
Setup script para instalação da API de Recortes.

Este arquivo permite instalar o projeto em modo editable para desenvolvimento:
    pip install -e .

Isso adiciona o projeto ao PYTHONPATH e permite imports como:
    from recortes.service import RecorteService
"""

from setuptools import setup, find_namespace_packages

setup(
    name="recortes-api",
    version="1.0.0",
    description="API de Recortes - autenticação, usuários e catálogo",
    packages=find_namespace_packages(
        include=["auth*", "users*", "recortes*", "database*", "middleware*", "utils*"]
    ),
    py_modules=["config", "main"],
    python_requires=">=3.10",
    install_requires=[
        "fastapi>=0.110",
        "uvicorn[standard]",
        "sqlalchemy>=2.0",
        "bcrypt>=4.0",
        "python-jose[cryptography]",
        "pydantic>=2.0",
        "python-dotenv",
        "structlog",
        "cloudinary",
        "python-multipart",
    ],
    extras_require={
        "test": [
            "pytest",
            "httpx",
        ],
    },
)
