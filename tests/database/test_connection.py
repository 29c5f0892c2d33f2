from __future__ import annotations

import pytest

from campus_attendance.database.connection import DatabaseConnection, DBConfig


@pytest.fixture(autouse=True)
def _fresh_instances(monkeypatch):
    monkeypatch.setattr(DatabaseConnection, "_instances", {})


def test_same_config_reuses_instance():
    a = DatabaseConnection.get_instance(DBConfig.from_dict({"database": "campus_a"}))
    b = DatabaseConnection.get_instance(DBConfig.from_dict({"database": "campus_a"}))

    assert a is b


def test_different_config_gets_its_own_instance():
    a = DatabaseConnection.get_instance(DBConfig.from_dict({"database": "campus_a"}))
    b = DatabaseConnection.get_instance(DBConfig.from_dict({"database": "campus_b", "port": 3307}))

    assert a is not b
    assert b._config.database == "campus_b"
    assert b._config.port == 3307
