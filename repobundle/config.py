"""
repobundle configuration.

Settings are read once at startup into an immutable ``BackupConfig`` that is
passed explicitly to the components that need it.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any
from urllib.parse import quote, urlsplit, urlunsplit

from dotenv import load_dotenv

from repobundle.exceptions import ConfigurationError
from repobundle.types.repos import Repository

DEFAULT_API_URL = "https://api.github.com"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


class TransportMode(Enum):
    """How repositories are cloned."""

    SSH = "ssh"
    TOKEN = "token"
    TOKEN_WITH_USERNAME = "token_with_username"


@dataclass(frozen=True)
class BackupConfig:
    """Process-wide settings for a backup run."""

    token: str
    backup_root: Path
    max_backups: int | None = None  # None disables pruning
    use_ssh_url: bool = False
    username: str | None = None
    git_timeout: float | None = None  # seconds per git invocation
    api_url: str = DEFAULT_API_URL

    def __post_init__(self) -> None:
        if not self.token:
            raise ConfigurationError("GITHUB_TOKEN is required")
        if self.max_backups is not None and self.max_backups < 1:
            raise ConfigurationError(
                f"MAX_BACKUPS must be at least 1, got {self.max_backups}"
            )
        if self.git_timeout is not None and self.git_timeout <= 0:
            raise ConfigurationError(
                f"GIT_TIMEOUT must be positive, got {self.git_timeout:g}"
            )

    @property
    def transport_mode(self) -> TransportMode:
        if self.use_ssh_url:
            return TransportMode.SSH
        if self.username:
            return TransportMode.TOKEN_WITH_USERNAME
        return TransportMode.TOKEN

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        env_file: str | Path | None = None,
        **overrides: Any,
    ) -> "BackupConfig":
        """
        Build configuration from environment variables.

        A ``.env`` file (``env_file`` or one found from the working directory)
        is loaded first; variables already present in the environment win.
        Keyword overrides that are not None take precedence over both.

        Environment variables:
            GITHUB_TOKEN: API token (required)
            BACKUP_PATH: Backup root (optional, default: current directory)
            MAX_BACKUPS: Bundles kept per repository (optional, unset disables pruning)
            USE_SSH_URL: Clone over ssh instead of https (optional, default: false)
            GITHUB_USERNAME: Embed username and token in https clone URLs (optional)
            GIT_TIMEOUT: Seconds allowed per git invocation (optional)
            GITHUB_API_URL: API base URL (optional, default: https://api.github.com)

        Raises:
            ConfigurationError: If a required variable is missing or a value
                cannot be parsed
        """
        if environ is None:
            load_dotenv(dotenv_path=env_file, override=False)
            environ = os.environ

        values: dict[str, Any] = {
            "token": environ.get("GITHUB_TOKEN", "").strip(),
            "backup_root": environ.get("BACKUP_PATH") or None,
            "max_backups": _parse_int("MAX_BACKUPS", environ.get("MAX_BACKUPS")),
            "use_ssh_url": _parse_bool("USE_SSH_URL", environ.get("USE_SSH_URL")),
            "username": environ.get("GITHUB_USERNAME") or None,
            "git_timeout": _parse_float("GIT_TIMEOUT", environ.get("GIT_TIMEOUT")),
            "api_url": environ.get("GITHUB_API_URL") or DEFAULT_API_URL,
        }
        values.update({key: value for key, value in overrides.items() if value is not None})

        if not values["token"]:
            raise ConfigurationError("GITHUB_TOKEN environment variable not set")

        backup_root = values.pop("backup_root")
        return cls(
            backup_root=Path(backup_root).expanduser() if backup_root else Path.cwd(),
            **values,
        )


def resolve_clone_url(repository: Repository, config: BackupConfig) -> str:
    """
    Pick the URL to mirror-clone ``repository`` from.

    ``SSH`` uses the key-authenticated URL, ``TOKEN`` the https URL as listed,
    and ``TOKEN_WITH_USERNAME`` the https URL with ``username:token@``
    inserted before the host.
    """
    mode = config.transport_mode

    if mode is TransportMode.SSH:
        return repository.ssh_url

    if mode is TransportMode.TOKEN:
        return repository.clone_url

    parts = urlsplit(repository.clone_url)
    host = parts.netloc.rsplit("@", 1)[-1]
    credentials = f"{quote(config.username or '', safe='')}:{quote(config.token, safe='')}"
    return urlunsplit(parts._replace(netloc=f"{credentials}@{host}"))


def _parse_int(name: str, raw: str | None) -> int | None:
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw.strip())
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def _parse_float(name: str, raw: str | None) -> float | None:
    if raw is None or not raw.strip():
        return None
    try:
        return float(raw.strip())
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None


def _parse_bool(name: str, raw: str | None) -> bool:
    if raw is None:
        return False
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be true or false, got {raw!r}")
