#!/usr/bin/env python
"""
Testes para validar a política de timezone do sistema.

Política:
- Backend grava e compara em UTC (timezone-aware)
- Datetimes naive vindos do SQLite são tratados como UTC

Uso:
    pytest tests/test_timezone.py -v
"""

from datetime import datetime, timedelta, timezone

from utils.timezone import ensure_utc, now_utc, to_iso


class TestTimezoneModule:
    """Testes do módulo utils/timezone.py"""

    def test_now_utc_returns_timezone_aware(self):
        """now_utc() deve retornar datetime com timezone UTC."""
        result = now_utc()

        assert result.tzinfo is not None, "Deve ser timezone-aware"
        assert result.tzinfo == timezone.utc, "Deve ser UTC"

    def test_ensure_utc_naive_vira_utc(self):
        naive = datetime(2026, 1, 20, 18, 30, 0)
        result = ensure_utc(naive)

        assert result.tzinfo == timezone.utc
        assert result.hour == 18

    def test_ensure_utc_converte_outro_offset(self):
        local = datetime(2026, 1, 20, 14, 30, tzinfo=timezone(timedelta(hours=-4)))
        assert ensure_utc(local).hour == 18

    def test_ensure_utc_none(self):
        assert ensure_utc(None) is None

    def test_to_iso_tem_offset(self):
        assert to_iso(datetime(2026, 1, 20, 18, 30)) == "2026-01-20T18:30:00+00:00"
        assert to_iso(None) is None

    def test_naive_e_aware_comparaveis_apos_ensure(self):
        """Comparar o que volta do banco com now_utc() não pode falhar."""
        from_db = now_utc().replace(tzinfo=None) - timedelta(minutes=1)
        assert ensure_utc(from_db) < now_utc()
