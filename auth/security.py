# auth/security.py
"""
Funções de segurança: hash de senha (bcrypt) e tokens de sessão (JWT)
"""

from datetime import timedelta
from typing import Iterable, Optional, TypeVar

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt

from config import SECRET_KEY, ALGORITHM, JWT_EXPIRES_MINUTES, BCRYPT_ROUNDS
from utils.timezone import now_utc

# bcrypt só considera os primeiros 72 bytes da senha
BCRYPT_MAX_BYTES = 72

T = TypeVar("T")


class TokenError(Exception):
    """Base dos erros de verificação de token."""


class TokenExpiredError(TokenError):
    """Assinatura válida, mas o token passou do exp."""


class TokenInvalidError(TokenError):
    """Token malformado, assinatura inválida ou claims ausentes."""


# ==========================================
# Senhas
# ==========================================

def _encode_password(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def get_password_hash(password: str, rounds: Optional[int] = None) -> str:
    """Gera hash bcrypt da senha (custo BCRYPT_ROUNDS por padrão)"""
    salt = bcrypt.gensalt(rounds=rounds or BCRYPT_ROUNDS)
    return bcrypt.hashpw(_encode_password(password), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verifica se a senha plain corresponde ao hash. Hash malformado conta como não-match."""
    if not plain_password or not hashed_password:
        return False
    try:
        return bcrypt.checkpw(_encode_password(plain_password), hashed_password.encode("utf-8"))
    except ValueError:
        return False


def find_matching_user(plain_password: str, users: Iterable[T]) -> Optional[T]:
    """
    Procura, na ordem recebida, o primeiro usuário cujo hash confere com a senha.

    Não há busca indexada possível (o alvo é um hash salgado), então o custo
    é O(n) verificações bcrypt. Aceitável apenas para poucos usuários.
    """
    for user in users:
        if verify_password(plain_password, user.hashed_password):
            return user
    return None


# ==========================================
# Tokens
# ==========================================

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Cria um token JWT assinado.

    Args:
        data: Claims a codificar (ex: {"userId": ..., "userName": ..., "userRole": ...})
        expires_delta: Validade; padrão JWT_EXPIRES_MINUTES (7 dias)

    Returns:
        Token JWT como string
    """
    issued_at = now_utc()
    if expires_delta is None:
        expires_delta = timedelta(minutes=JWT_EXPIRES_MINUTES)

    to_encode = data.copy()
    to_encode.update({"iat": issued_at, "exp": issued_at + expires_delta})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str) -> dict:
    """
    Verifica assinatura e expiração de um token.

    Returns:
        Claims do token

    Raises:
        TokenExpiredError: token expirado
        TokenInvalidError: qualquer outra falha de verificação
    """
    if not token:
        raise TokenInvalidError("Token vazio")
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError as e:
        raise TokenExpiredError(str(e)) from e
    except JWTError as e:
        raise TokenInvalidError(str(e)) from e
