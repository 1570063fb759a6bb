import pytest
from pydantic import ValidationError

from leadhub.config import DEV_JWT_SECRET, Settings

DB_VARS = ("DB_HOST", "POSTGRES_HOST", "DB_NAME", "POSTGRES_DB", "DB_USER", "POSTGRES_USER")


@pytest.fixture
def clean_env(monkeypatch):
    for name in DB_VARS + ("ENVIRONMENT", "JWT_SECRET"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_postgres_names_are_a_fallback(clean_env):
    clean_env.setenv("POSTGRES_HOST", "pg.internal")
    clean_env.setenv("POSTGRES_DB", "leads")
    clean_env.setenv("POSTGRES_USER", "hub")

    settings = Settings(_env_file=None)

    assert settings.db_host == "pg.internal"
    assert settings.db_name == "leads"
    assert settings.db_user == "hub"


def test_db_names_win_over_postgres_names(clean_env):
    clean_env.setenv("DB_HOST", "db.internal")
    clean_env.setenv("POSTGRES_HOST", "pg.internal")

    assert Settings(_env_file=None).db_host == "db.internal"


def test_production_refuses_default_jwt_secret(clean_env):
    clean_env.setenv("ENVIRONMENT", "production")

    with pytest.raises(ValidationError, match="JWT_SECRET must be set in production"):
        Settings(_env_file=None)

    clean_env.setenv("JWT_SECRET", "a-real-secret")
    assert Settings(_env_file=None).is_production


def test_development_accepts_default_jwt_secret(clean_env):
    assert Settings(_env_file=None).jwt_secret == DEV_JWT_SECRET
