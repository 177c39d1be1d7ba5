from __future__ import annotations

from pathlib import Path

from .constants import CONFIG_FILE_NAME
from .errors import ConfigError


def load_password(path: str | Path = CONFIG_FILE_NAME) -> str:
    """Return the RCon password: the first whitespace-separated word of `path`."""
    try:
        content = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"cannot read password file {path}: {exc}") from exc

    words = content.split()
    if not words:
        raise ConfigError(f"password file {path} is empty")
    return words[0]
