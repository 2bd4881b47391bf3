# database/init_db.py
"""
Inicialização do banco de dados e seed do usuário admin
"""

import time

from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from database.connection import engine, Base, SessionLocal
from auth.models import User, LoginAttempt, ROLE_ADMIN  # noqa: F401 (registra tabelas)
from auth.security import get_password_hash
from recortes.models import Recorte  # noqa: F401
from config import ADMIN_NAME, ADMIN_PASSWORD
from utils.logging_config import get_logger

logger = get_logger(__name__)


def wait_for_db(max_retries=10, delay=3):
    """Aguarda o banco de dados ficar disponível"""
    for attempt in range(max_retries):
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            logger.info("Conexão com banco de dados estabelecida")
            return True
        except OperationalError:
            if attempt < max_retries - 1:
                logger.warning("Aguardando banco de dados", attempt=attempt + 1, max_retries=max_retries)
                time.sleep(delay)
            else:
                logger.error("Não foi possível conectar ao banco", max_retries=max_retries)
                raise
    return False


def create_tables():
    """Cria todas as tabelas no banco de dados"""
    Base.metadata.create_all(bind=engine)
    logger.info("Tabelas criadas")


def ensure_admin(db: Session) -> User:
    """
    Garante que exista ao menos um admin.

    Idempotente: se já houver qualquer usuário com role admin, nada é criado.
    """
    admin = db.query(User).filter(User.role == ROLE_ADMIN).order_by(User.created_at.asc()).first()
    if admin is not None:
        logger.info("Usuário admin já existe", name=admin.name)
        return admin

    admin = User(
        name=ADMIN_NAME,
        hashed_password=get_password_hash(ADMIN_PASSWORD),
        role=ROLE_ADMIN,
        description="Administrador do sistema",
        created_by=None,
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    logger.info("Usuário admin criado", name=ADMIN_NAME)
    return admin


def seed_admin():
    """Cria o usuário administrador inicial se não existir"""
    db = SessionLocal()
    try:
        ensure_admin(db)
    finally:
        db.close()


def init_database():
    """Inicializa o banco de dados completo"""
    logger.info("Inicializando banco de dados")
    wait_for_db()
    create_tables()
    seed_admin()
    logger.info("Banco de dados inicializado")


if __name__ == "__main__":
    init_database()
