# tests/test_security.py
"""
Testes de hash de senha e tokens JWT (auth/security.py)
"""

from datetime import timedelta
from types import SimpleNamespace

import pytest
from jose import jwt

from auth.security import (
    TokenExpiredError,
    TokenInvalidError,
    create_access_token,
    decode_token,
    find_matching_user,
    get_password_hash,
    verify_password,
)
from config import ALGORITHM, SECRET_KEY


# ==================================================
# SENHAS
# ==================================================

class TestPasswordHash:
    """Hash bcrypt e verificação."""

    def test_hash_nao_e_a_senha(self):
        hashed = get_password_hash("segredo1")
        assert hashed != "segredo1"
        assert hashed.startswith("$2")

    def test_hashes_salgados_diferem(self):
        assert get_password_hash("segredo1") != get_password_hash("segredo1")

    def test_verifica_senha_correta(self):
        hashed = get_password_hash("segredo1")
        assert verify_password("segredo1", hashed) is True

    def test_rejeita_senha_errada(self):
        hashed = get_password_hash("segredo1")
        assert verify_password("segredo2", hashed) is False

    def test_senha_vazia_nunca_confere(self):
        hashed = get_password_hash("segredo1")
        assert verify_password("", hashed) is False

    def test_hash_malformado_nao_confere(self):
        assert verify_password("segredo1", "nao-e-um-hash") is False

    def test_senha_longa_truncada_em_72_bytes(self):
        """bcrypt só usa 72 bytes; senhas maiores não devem quebrar."""
        longa = "a" * 100
        hashed = get_password_hash(longa)
        assert verify_password(longa, hashed) is True
        assert verify_password("a" * 72, hashed) is True


class TestFindMatchingUser:
    """Varredura linear pelo primeiro hash que confere."""

    def test_retorna_primeiro_que_confere(self):
        users = [
            SimpleNamespace(id="1", hashed_password=get_password_hash("aaaa")),
            SimpleNamespace(id="2", hashed_password=get_password_hash("bbbb")),
            SimpleNamespace(id="3", hashed_password=get_password_hash("bbbb")),
        ]
        assert find_matching_user("bbbb", users).id == "2"

    def test_nenhum_confere(self):
        users = [SimpleNamespace(id="1", hashed_password=get_password_hash("aaaa"))]
        assert find_matching_user("zzzz", users) is None

    def test_lista_vazia(self):
        assert find_matching_user("aaaa", []) is None


# ==================================================
# TOKENS
# ==================================================

class TestTokens:
    """Emissão e verificação de tokens."""

    CLAIMS = {"userId": "abc", "userName": "Ana", "userRole": "user"}

    def test_round_trip_preserva_claims(self):
        token = create_access_token(self.CLAIMS)
        claims = decode_token(token)
        assert claims["userId"] == "abc"
        assert claims["userName"] == "Ana"
        assert claims["userRole"] == "user"

    def test_validade_padrao_sete_dias(self):
        claims = decode_token(create_access_token(self.CLAIMS))
        assert claims["exp"] - claims["iat"] == 7 * 24 * 60 * 60

    def test_token_expirado(self):
        token = create_access_token(self.CLAIMS, expires_delta=timedelta(seconds=-1))
        with pytest.raises(TokenExpiredError):
            decode_token(token)

    def test_assinatura_errada_e_invalido(self):
        token = jwt.encode(self.CLAIMS, "outra-chave", algorithm=ALGORITHM)
        with pytest.raises(TokenInvalidError):
            decode_token(token)

    def test_token_malformado_e_invalido(self):
        with pytest.raises(TokenInvalidError):
            decode_token("isto.nao.e-um-jwt")

    def test_token_vazio_e_invalido(self):
        with pytest.raises(TokenInvalidError):
            decode_token("")

    def test_expirado_e_distinto_de_invalido(self):
        """Expirado não deve ser tratado como assinatura inválida."""
        token = jwt.encode({**self.CLAIMS, "exp": 1}, SECRET_KEY, algorithm=ALGORITHM)
        with pytest.raises(TokenExpiredError):
            decode_token(token)
