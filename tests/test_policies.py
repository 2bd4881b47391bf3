# tests/test_policies.py
"""
Testes das regras de autorização sobre usuários (auth/policies.py)
"""

from types import SimpleNamespace

import pytest

from auth.policies import (
    CANNOT_DELETE_ADMIN,
    CANNOT_DELETE_SELF,
    INSUFFICIENT_PERMISSIONS,
    can_create_user,
    can_delete_user,
    can_update_user,
    check_can_delete_user,
    check_can_update_user,
    delete_denial_reason,
)
from auth.schemas import AuthContext
from utils.errors import ForbiddenError

ADMIN = AuthContext(user_id="admin", user_name="Administrador", role="admin")
ALICE = AuthContext(user_id="alice", user_name="Alice", role="user")


def target(id, role="user", created_by=None):
    return SimpleNamespace(id=id, role=role, created_by=created_by)


class TestCriacao:

    def test_qualquer_autenticado_cria(self):
        assert can_create_user(ADMIN) is True
        assert can_create_user(ALICE) is True

    def test_sem_chamador_nao_cria(self):
        assert can_create_user(None) is False


class TestAtualizacao:

    def test_admin_atualiza_qualquer_um(self):
        assert can_update_user(ADMIN, target("x")) is True
        assert can_update_user(ADMIN, target("admin2", role="admin")) is True

    def test_usuario_atualiza_a_si_mesmo(self):
        assert can_update_user(ALICE, target("alice", created_by="admin")) is True

    def test_usuario_atualiza_quem_criou(self):
        assert can_update_user(ALICE, target("bob", created_by="alice")) is True

    def test_usuario_nao_atualiza_criado_por_outro(self):
        assert can_update_user(ALICE, target("carol", created_by="bob")) is False

    def test_usuario_nao_atualiza_admin_mesmo_que_tenha_criado(self):
        assert can_update_user(ALICE, target("adm", role="admin", created_by="alice")) is False

    def test_check_lanca_forbidden(self):
        with pytest.raises(ForbiddenError) as exc:
            check_can_update_user(ALICE, target("carol", created_by="bob"))
        assert exc.value.code == INSUFFICIENT_PERMISSIONS


class TestExclusao:

    def test_ninguem_exclui_admin(self):
        assert delete_denial_reason(ADMIN, target("outro-admin", role="admin")) == CANNOT_DELETE_ADMIN
        assert delete_denial_reason(ALICE, target("adm", role="admin", created_by="alice")) == CANNOT_DELETE_ADMIN

    def test_admin_excluindo_a_si_mesmo_e_cannot_delete_admin(self):
        """A checagem de alvo admin vem antes da de auto exclusão."""
        assert delete_denial_reason(ADMIN, target("admin", role="admin")) == CANNOT_DELETE_ADMIN

    def test_usuario_nao_exclui_a_si_mesmo(self):
        assert delete_denial_reason(ALICE, target("alice", created_by="admin")) == CANNOT_DELETE_SELF

    def test_admin_exclui_usuario_comum(self):
        assert can_delete_user(ADMIN, target("bob", created_by="alice")) is True

    def test_usuario_exclui_quem_criou(self):
        assert can_delete_user(ALICE, target("bob", created_by="alice")) is True

    def test_usuario_nao_exclui_criado_por_outro(self):
        assert delete_denial_reason(ALICE, target("carol", created_by="bob")) == INSUFFICIENT_PERMISSIONS

    def test_check_lanca_com_codigo_do_motivo(self):
        with pytest.raises(ForbiddenError) as exc:
            check_can_delete_user(ALICE, target("alice"))
        assert exc.value.code == CANNOT_DELETE_SELF
        assert exc.value.status_code == 403
