# database/connection.py
"""
Conexão com o banco de dados (SQLAlchemy 2.0)
"""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker, declarative_base, Session

from config import DATABASE_URL
from utils.errors import InternalError
from utils.logging_config import get_logger

logger = get_logger(__name__)

if DATABASE_URL.startswith("sqlite"):
    engine = create_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False},  # Necessário para SQLite
        echo=False
    )
else:
    # pool_timeout limita a espera por conexão; o erro vira INTERNAL_ERROR
    engine = create_engine(
        DATABASE_URL,
        echo=False,
        pool_size=5,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=1800,
        pool_pre_ping=True
    )

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """
    Dependency que fornece uma sessão do banco de dados.
    Uso: db: Session = Depends(get_db)
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def store_operation(db: Session, action: str):
    """
    Delimita uma operação no banco.

    Erros do SQLAlchemy (exceto IntegrityError, que o chamador traduz para
    o "já existe" adequado) fazem rollback, são logados e viram
    INTERNAL_ERROR sem expor o texto do banco.

    Uso:
        with store_operation(db, "criar usuário"):
            db.add(user)
            db.commit()
    """
    try:
        yield
    except IntegrityError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Erro no banco de dados", action=action, error=type(e).__name__)
        raise InternalError()
