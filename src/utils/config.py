from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv


@dataclass(frozen=True)
class APIConfig:
    title: str
    version: str


@dataclass(frozen=True)
class PoolConfig:
    minconn: int
    maxconn: int


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    name: str
    user: str
    password: str
    database_url: str | None = None

    @property
    def dsn(self) -> str:
        if self.database_url:
            return self.database_url
        return f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}/{self.name}"


def _project_root() -> Path:
    # Resolve from this file: .../src/utils/config.py -> project root is 3 parents up.
    return Path(__file__).resolve().parents[2]


def _config_path(path: str | None) -> Path:
    return Path(path or os.getenv("COUNTRIES_API_CONFIG") or (_project_root() / "config" / "api.yaml"))


def load_db_config() -> DBConfig:
    """
    Database settings from the environment (.env is honoured).

    Explicit POSTGRES_* params win when all of them are set; otherwise
    DATABASE_URL is used if present; otherwise each POSTGRES_* falls back to
    its default.
    """
    load_dotenv()
    names = ("POSTGRES_HOST", "POSTGRES_PORT", "POSTGRES_DB", "POSTGRES_USER", "POSTGRES_PASSWORD")
    explicit = all(os.getenv(n) for n in names)
    database_url = None if explicit else (os.getenv("DATABASE_URL") or None)

    return DBConfig(
        host=os.getenv("POSTGRES_HOST", "localhost"),
        port=int(os.getenv("POSTGRES_PORT", "5432")),
        name=os.getenv("POSTGRES_DB", "countries"),
        user=os.getenv("POSTGRES_USER", "postgres"),
        password=os.getenv("POSTGRES_PASSWORD", "postgres"),
        database_url=database_url,
    )


def load_api_config(path: str | None = None) -> APIConfig:
    """
    Load API metadata from YAML.

    Precedence:
    - explicit `path`
    - env `COUNTRIES_API_CONFIG`
    - project default `config/api.yaml`
    """
    cfg_path = _config_path(path)
    cfg = load_yaml(cfg_path)
    api = cfg.get("api") or {}

    title = api.get("title")
    version = api.get("version")
    if not title:
        raise ValueError(f"Missing api.title in {cfg_path}")
    if not version:
        raise ValueError(f"Missing api.version in {cfg_path}")

    return APIConfig(title=str(title), version=str(version))


def load_pool_config(path: str | None = None) -> PoolConfig:
    cfg_path = _config_path(path)
    cfg = load_yaml(cfg_path)
    db = cfg.get("db") or {}

    minconn = db.get("minconn")
    maxconn = db.get("maxconn")

    missing: list[str] = []
    if minconn is None:
        missing.append("db.minconn")
    if maxconn is None:
        missing.append("db.maxconn")
    if missing:
        raise ValueError(f"Missing {', '.join(missing)} in {cfg_path}")
    if int(minconn) > int(maxconn):
        raise ValueError(f"db.minconn must be <= db.maxconn in {cfg_path}")

    return PoolConfig(minconn=int(minconn), maxconn=int(maxconn))


def load_yaml(path: str | Path) -> dict[str, Any]:
    p = Path(path)
    return yaml.safe_load(p.read_text(encoding="utf-8")) or {}
