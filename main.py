# main.py
"""
API de Recortes - Aplicação FastAPI Principal

Reúne:
- Autenticação por senha com JWT e bloqueio de força bruta por IP
- Gestão de usuários com regras de posse
- Catálogo de recortes com imagens no Cloudinary
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from auth.router import router as auth_router
from config import CORS_ORIGINS, ENV, validate_settings
from database.init_db import init_database
from middleware import RequestIDMiddleware
from recortes.router import router as recortes_router
from users.router import router as users_router
from utils.errors import AppError, app_error_handler, unhandled_error_handler, validation_error_handler
from utils.logging_config import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifecycle events da aplicação.
    Executa na inicialização e no shutdown.
    """
    # Startup
    setup_logging()
    missing = validate_settings()
    if missing:
        logger.warning("Variáveis de ambiente ausentes, usando padrões", missing=missing)
    logger.info("Iniciando API de Recortes", env=ENV)
    init_database()
    yield
    # Shutdown
    logger.info("Encerrando API de Recortes")


# Cria a aplicação FastAPI
app = FastAPI(
    title="API de Recortes",
    description="Autenticação, usuários e catálogo de recortes",
    version="1.0.0",
    lifespan=lifespan
)

# Configuração de CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Request ID por último para envolver todos os outros
app.add_middleware(RequestIDMiddleware)

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)
app.add_exception_handler(Exception, unhandled_error_handler)


@app.get("/health")
async def health_check():
    """Health check para monitoramento"""
    return {
        "status": "ok",
        "service": "recortes-api",
        "env": ENV,
    }


# ==================================================
# ROUTERS
# ==================================================

app.include_router(auth_router)
app.include_router(users_router)
app.include_router(recortes_router)


# ==================================================
# EXECUÇÃO DIRETA
# ==================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
