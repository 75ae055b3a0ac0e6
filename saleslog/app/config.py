"""Runtime settings read from the environment (and a ``.env`` file if present)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv  # type: ignore

from ..core.errors import ConfigError

BACKENDS = ("file", "memory")


@dataclass(frozen=True)
class Settings:
    backend: str = "file"
    data_dir: Path = Path("~/.saleslog")
    log_level: str = "WARNING"
    default_location_name: str = "Storefront"
    default_location_address: str = "Main branch"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from ``environ`` (defaults to ``os.environ`` after load_dotenv)."""
        if environ is None:
            load_dotenv()
            environ = os.environ
        backend = (environ.get("SALESLOG_BACKEND") or cls.backend).strip().lower()
        if backend not in BACKENDS:
            raise ConfigError(
                f"SALESLOG_BACKEND must be one of {', '.join(BACKENDS)}, got {backend!r}",
                code="backend",
            )
        return cls(
            backend=backend,
            data_dir=Path(environ.get("SALESLOG_DATA_DIR") or cls.data_dir).expanduser(),
            log_level=(environ.get("SALESLOG_LOG_LEVEL") or cls.log_level).upper(),
            default_location_name=environ.get("SALESLOG_DEFAULT_LOCATION_NAME")
            or cls.default_location_name,
            default_location_address=environ.get("SALESLOG_DEFAULT_LOCATION_ADDRESS")
            or cls.default_location_address,
        )
