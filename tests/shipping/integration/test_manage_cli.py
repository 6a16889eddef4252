"""Tests for the database management CLI wiring."""

import manage
import pytest
from shipping.domain import shipping
from shipping.utils.db import setup_db


class TestManageCommands:
    def test_setup_db_dispatch(self, monkeypatch):
        calls = []
        monkeypatch.setattr(manage, "setup_database", lambda: calls.append("setup"))
        manage.main(["setup-db"])
        assert calls == ["setup"]

    def test_drop_db_dispatch(self, monkeypatch):
        calls = []
        monkeypatch.setattr(manage, "drop_database", lambda: calls.append("drop"))
        manage.main(["drop-db"])
        assert calls == ["drop"]

    def test_command_required(self):
        with pytest.raises(SystemExit):
            manage.main([])


class TestSchemaUtilities:
    def test_setup_reports_relational_providers(self):
        relational = [
            name
            for name, provider in shipping.providers.items()
            if provider.conn_info["provider"] in ("sqlite", "postgresql")
        ]
        assert setup_db(shipping) == relational
