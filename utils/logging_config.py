# utils/logging_config.py
"""
Logging estruturado com structlog.

- Produção: JSON (parseável por ferramentas de observabilidade)
- Desenvolvimento/teste: console legível
- request_id adicionado automaticamente quando disponível

USO:
    from utils.logging_config import get_logger

    logger = get_logger(__name__)
    logger.info("Recorte criado", recorte_id=recorte.id, sku=recorte.sku)
"""

import logging
import sys
from functools import lru_cache

import structlog

from config import IS_PRODUCTION

SERVICE_NAME = "recortes-api"


def add_request_id(logger, method_name: str, event_dict: dict) -> dict:
    """Processador que adiciona o request_id do ContextVar do middleware."""
    from middleware.request_id import get_request_id

    request_id = get_request_id()
    if request_id:
        event_dict["request_id"] = request_id
    return event_dict


def add_service_info(logger, method_name: str, event_dict: dict) -> dict:
    event_dict["service"] = SERVICE_NAME
    return event_dict


def configure_structlog():
    """Configura os processadores do structlog conforme o ambiente."""
    shared_processors = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        add_request_id,
        add_service_info,
    ]

    if IS_PRODUCTION:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]
    else:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=False),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_stdlib_logging():
    """Integra o logging padrão (uvicorn, sqlalchemy) ao mesmo handler."""
    root_level = logging.INFO if IS_PRODUCTION else logging.DEBUG

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(root_level)

    if IS_PRODUCTION:
        handler.setFormatter(structlog.stdlib.ProcessorFormatter(
            processor=structlog.processors.JSONRenderer(ensure_ascii=False),
            foreign_pre_chain=[
                structlog.stdlib.add_log_level,
                structlog.processors.TimeStamper(fmt="iso", utc=True),
                add_request_id,
            ],
        ))
    else:
        handler.setFormatter(logging.Formatter(
            "[%(asctime)s] %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))

    root_logger = logging.getLogger()
    root_logger.setLevel(root_level)
    root_logger.handlers = [handler]

    # Silencia loggers verbosos
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def setup_logging():
    """
    Configuração principal de logging.

    Chamada uma vez no lifespan da aplicação (main.py).
    """
    configure_stdlib_logging()
    configure_structlog()


@lru_cache(maxsize=128)
def get_logger(name: str):
    """Retorna um logger structlog para o módulo (use __name__)."""
    return structlog.get_logger(name)


configure_structlog()


__all__ = [
    "setup_logging",
    "get_logger",
    "SERVICE_NAME",
]
