from donation_vote.config import engine_options


def test_postgres_gets_connect_and_lock_timeouts(monkeypatch):
    monkeypatch.setenv("DB_CONNECT_TIMEOUT_SECONDS", "3")
    monkeypatch.setenv("DB_LOCK_TIMEOUT_MS", "1500")
    monkeypatch.setenv("DB_STATEMENT_TIMEOUT_MS", "8000")

    options = engine_options("postgresql://u:p@db:5432/votes")

    assert options["pool_pre_ping"] is True
    assert options["connect_args"] == {
        "connect_timeout": 3,
        "options": "-c lock_timeout=1500 -c statement_timeout=8000",
    }


def test_sqlite_keeps_pool_settings_only(monkeypatch):
    monkeypatch.setenv("DB_POOL_TIMEOUT_SECONDS", "4")

    options = engine_options("sqlite:///votes.db")

    assert options == {"pool_pre_ping": True, "pool_timeout": 4}
