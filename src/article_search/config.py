"""Connection settings, index name and seed sizes, resolved from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


def _xdg_config_home() -> Path:
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


def _env_int(name: str, default: int) -> int:
    return int(os.environ.get(name, default))


def _env_float(name: str, default: float) -> float:
    return float(os.environ.get(name, default))


ENV_FILE_TEMPLATE = """\
# Article Search settings, written by `articles init`.
# Read by the articles CLI before each command.
# Variables already set in the environment win over this file.

# Backend: redis or memory
ARTICLES_BACKEND={backend}

REDIS_HOST={redis_host}
REDIS_PORT={redis_port}
REDIS_DB={redis_db}
# REDIS_PASSWORD=
REDIS_SOCKET_TIMEOUT={socket_timeout}

ARTICLES_INDEX_NAME={index_name}
ARTICLES_SEED_AUTHORS={seed_authors}
ARTICLES_SEED_ARTICLES={seed_articles}
"""


@dataclass
class Config:
    """Runtime configuration, resolved from env vars and defaults."""

    # Env file
    env_file: Path = field(default_factory=lambda: _xdg_config_home() / "article-search" / "env")

    # "redis" | "memory"
    backend: str = field(default_factory=lambda: os.environ.get("ARTICLES_BACKEND", "redis"))

    # Redis connection
    redis_host: str = field(default_factory=lambda: os.environ.get("REDIS_HOST", "localhost"))
    redis_port: int = field(default_factory=lambda: _env_int("REDIS_PORT", 6379))
    redis_db: int = field(default_factory=lambda: _env_int("REDIS_DB", 0))
    redis_password: str | None = field(default_factory=lambda: os.environ.get("REDIS_PASSWORD") or None)
    socket_timeout: float = field(default_factory=lambda: _env_float("REDIS_SOCKET_TIMEOUT", 5.0))

    # Index
    index_name: str = field(default_factory=lambda: os.environ.get("ARTICLES_INDEX_NAME", "article-idx"))

    # Seeder
    seed_authors: int = field(default_factory=lambda: _env_int("ARTICLES_SEED_AUTHORS", 100))
    seed_articles: int = field(default_factory=lambda: _env_int("ARTICLES_SEED_ARTICLES", 1000))

    def read_env_file(self) -> dict[str, str]:
        """Parse KEY=VALUE lines from the env file. Comments and blank lines are skipped."""
        settings: dict[str, str] = {}
        if not self.env_file.exists():
            return settings
        for line in self.env_file.read_text().splitlines():
            key, sep, value = line.strip().partition("=")
            if not sep or key.startswith("#"):
                continue
            settings[key.strip()] = value.strip().strip("'\"")
        return settings

    def load_env_file(self) -> None:
        """Copy env file settings into os.environ, leaving variables already set alone."""
        for key, value in self.read_env_file().items():
            if key:
                os.environ.setdefault(key, value)

    def ensure_env_file(self) -> bool:
        """Write the resolved settings (minus the password) to a new env file.

        Returns True if the file was created, False if one already exists.
        """
        if self.env_file.exists():
            return False
        self.env_file.parent.mkdir(parents=True, exist_ok=True)
        self.env_file.write_text(
            ENV_FILE_TEMPLATE.format(
                backend=self.backend,
                redis_host=self.redis_host,
                redis_port=self.redis_port,
                redis_db=self.redis_db,
                socket_timeout=self.socket_timeout,
                index_name=self.index_name,
                seed_authors=self.seed_authors,
                seed_articles=self.seed_articles,
            )
        )
        self.env_file.chmod(0o600)
        return True
