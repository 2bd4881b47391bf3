# tests/test_brute_force.py
# -*- coding: utf-8 -*-
"""
Testes da proteção contra força bruta (utils/brute_force.py)

Testa:
- Contagem de falhas e bloqueio ao atingir o limite
- Expiração do bloqueio (falhas sem bloqueio continuam somando)
- Limpeza após login bem sucedido
- Liberação da requisição quando o banco falha
"""

from datetime import timedelta
from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError

from auth.models import LoginAttempt
from utils.brute_force import BruteForceConfig, BruteForceProtection
from utils.timezone import now_utc

IP = "203.0.113.7"


class FakeClock:
    """Relógio controlável para simular a passagem do tempo."""

    def __init__(self):
        self.now = now_utc()

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


def make_guard(db, clock=None, max_attempts=5, block_minutes=15):
    config = BruteForceConfig(max_attempts=max_attempts, block_minutes=block_minutes)
    return BruteForceProtection(db, config, clock=clock or FakeClock())


# ==================================================
# CONTAGEM E BLOQUEIO
# ==================================================

class TestContagem:

    def test_ip_desconhecido_esta_limpo(self, db):
        status = make_guard(db).check(IP)
        assert status.is_blocked is False
        assert status.attempts == 0

    def test_primeira_falha_cria_registro(self, db):
        guard = make_guard(db)
        guard.record_failure(IP)

        record = db.query(LoginAttempt).filter_by(ip=IP).one()
        assert record.attempts == 1
        assert record.blocked_at is None

    def test_falhas_abaixo_do_limite_nao_bloqueiam(self, db):
        guard = make_guard(db)
        for _ in range(4):
            guard.record_failure(IP)

        status = guard.check(IP)
        assert status.is_blocked is False
        assert status.attempts == 4

    def test_quinta_falha_bloqueia(self, db):
        guard = make_guard(db)
        for _ in range(5):
            guard.record_failure(IP)

        status = guard.check(IP)
        assert status.is_blocked is True
        assert status.remaining_minutes == 15
        assert "15 minutos" in status.message

    def test_minutos_restantes_arredondados_para_cima(self, db):
        clock = FakeClock()
        guard = make_guard(db, clock)
        for _ in range(5):
            guard.record_failure(IP)

        clock.advance(minutes=10, seconds=30)
        assert guard.check(IP).remaining_minutes == 5

    def test_ips_sao_independentes(self, db):
        guard = make_guard(db)
        for _ in range(5):
            guard.record_failure(IP)

        assert guard.check("198.51.100.1").is_blocked is False


# ==================================================
# EXPIRAÇÃO
# ==================================================

class TestExpiracao:

    def test_bloqueio_expira(self, db):
        clock = FakeClock()
        guard = make_guard(db, clock)
        for _ in range(5):
            guard.record_failure(IP)

        clock.advance(minutes=15, seconds=1)
        status = guard.check(IP)

        assert status.is_blocked is False
        assert db.query(LoginAttempt).filter_by(ip=IP).count() == 0

    def test_contagem_reinicia_apos_bloqueio_expirar(self, db):
        clock = FakeClock()
        guard = make_guard(db, clock)
        for _ in range(5):
            guard.record_failure(IP)

        clock.advance(minutes=16)
        guard.check(IP)
        guard.record_failure(IP)

        assert db.query(LoginAttempt).filter_by(ip=IP).one().attempts == 1

    def test_falhas_espacadas_continuam_somando(self, db):
        """Sem bloqueio o registro não expira: 4 falhas, espera, 5a falha bloqueia."""
        clock = FakeClock()
        guard = make_guard(db, clock)
        for _ in range(4):
            guard.record_failure(IP)

        clock.advance(minutes=16)
        assert guard.check(IP).attempts == 4
        guard.record_failure(IP)

        status = guard.check(IP)
        assert status.is_blocked is True
        assert status.attempts == 5
        assert status.remaining_minutes == 15

    def test_falhas_antigas_nao_sao_apagadas(self, db):
        clock = FakeClock()
        guard = make_guard(db, clock)
        for _ in range(3):
            guard.record_failure(IP)

        clock.advance(hours=2)
        assert guard.check(IP).attempts == 3
        assert db.query(LoginAttempt).filter_by(ip=IP).count() == 1


# ==================================================
# SUCESSO E ADMINISTRAÇÃO
# ==================================================

class TestSucesso:

    def test_sucesso_limpa_historico(self, db):
        guard = make_guard(db)
        for _ in range(3):
            guard.record_failure(IP)

        guard.record_success(IP)

        assert db.query(LoginAttempt).filter_by(ip=IP).count() == 0
        assert guard.check(IP).attempts == 0

    def test_stats(self, db):
        guard = make_guard(db)
        for _ in range(5):
            guard.record_failure(IP)
        guard.record_failure("198.51.100.1")

        stats = guard.get_stats()
        assert stats["tracked_ips"] == 2
        assert stats["blocked_ips"] == 1
        assert stats["config"]["max_attempts"] == 5

    def test_unblock_ip(self, db):
        guard = make_guard(db)
        for _ in range(5):
            guard.record_failure(IP)

        assert guard.unblock_ip(IP) is True
        assert guard.check(IP).is_blocked is False
        assert guard.unblock_ip(IP) is False


# ==================================================
# FALHAS DO BANCO
# ==================================================

class TestFalhasDoBanco:
    """Erros no ledger não podem derrubar o login."""

    def _broken_db(self):
        db = MagicMock()
        db.query.side_effect = OperationalError("SELECT", {}, Exception("db down"))
        return db

    def test_check_libera_quando_banco_falha(self):
        db = self._broken_db()
        status = make_guard(db).check(IP)

        assert status.is_blocked is False
        db.rollback.assert_called_once()

    def test_record_failure_nao_propaga_erro(self):
        db = self._broken_db()
        make_guard(db).record_failure(IP)
        db.rollback.assert_called_once()

    def test_record_success_nao_propaga_erro(self):
        db = self._broken_db()
        make_guard(db).record_success(IP)
        db.rollback.assert_called_once()
