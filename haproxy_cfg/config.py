"""Application configuration helpers."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import os

try:  # pragma: no cover - pwd isn't available on Windows
    import pwd
except ImportError:  # pragma: no cover
    pwd = None


def _determine_home() -> Path:
    sudo_user = os.environ.get("SUDO_USER")
    if sudo_user and pwd:
        try:
            return Path(pwd.getpwnam(sudo_user).pw_dir)
        except KeyError:  # pragma: no cover - only when user missing from passwd
            pass
    return Path.home()


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


APP_DIR = Path(os.environ.get("HAPROXY_CFG_HOME", _determine_home() / ".haproxy-cfg"))
DB_PATH = Path(os.environ.get("HAPROXY_CFG_DB", APP_DIR / "snapshots.db"))
HAPROXY_CONFIG = Path(os.environ.get("HAPROXY_CFG_CONFIG", "/etc/haproxy/haproxy.cfg"))
LOG_LEVEL = os.environ.get("HAPROXY_CFG_LOG_LEVEL", "WARNING").upper()

# Undecodable bytes survive a read/write cycle unchanged.
FILE_ENCODING = "utf-8"
FILE_ERRORS = "surrogateescape"


@dataclass(slots=True)
class ParserOptions:
    """Switches that change how a configuration stream is processed."""

    disable_unprocessed: bool = False
    strict: bool = False
    use_md5_hash: bool = False
    log_prefix: str = ""
    path: Path | None = None

    @classmethod
    def from_env(cls, **overrides) -> "ParserOptions":
        options = cls(
            disable_unprocessed=_env_flag("HAPROXY_CFG_DISABLE_UNPROCESSED"),
            strict=_env_flag("HAPROXY_CFG_STRICT"),
            use_md5_hash=_env_flag("HAPROXY_CFG_MD5HASH"),
        )
        for key, value in overrides.items():
            setattr(options, key, value)
        return options


def ensure_app_dir(path: Path | None = None) -> Path:
    """Ensure the data directory exists and return it."""
    target = path or APP_DIR
    target.mkdir(parents=True, exist_ok=True)
    return target
