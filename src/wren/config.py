"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups. ``AppConfig.from_env()`` builds one from the
process environment for deployments that configure through variables.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from wren.errors import ConfigurationError

_LOG_LEVELS = frozenset({"debug", "info", "warning", "error", "critical"})


class BodyPolicy(Enum):
    """How malformed JSON bodies are treated before dispatch.

    ``LENIENT`` lets handlers see empty and malformed bodies alike as
    ``None``. ``STRICT`` answers malformed bodies with 400 before any
    handler runs.
    """

    LENIENT = "lenient"
    STRICT = "strict"


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(port=8080, max_body_bytes=64 * 1024)
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 3333
    debug: bool = False
    workers: int = 1
    log_level: str = "info"

    # Body ingestion
    max_body_bytes: int = 1024 * 1024  # 1 MiB
    read_timeout_ms: int = 30_000  # 0 disables the deadline
    body_policy: BodyPolicy = BodyPolicy.LENIENT

    # Response header policy (None leaves responses untouched)
    default_content_type: str | None = "application/json"

    def __post_init__(self) -> None:
        if self.max_body_bytes <= 0:
            msg = f"max_body_bytes must be positive, got {self.max_body_bytes}"
            raise ConfigurationError(msg)
        if self.read_timeout_ms < 0:
            msg = f"read_timeout_ms must be >= 0, got {self.read_timeout_ms}"
            raise ConfigurationError(msg)
        if not 0 <= self.port <= 65535:
            msg = f"port must be between 0 and 65535, got {self.port}"
            raise ConfigurationError(msg)
        if self.workers < 0:
            msg = f"workers must be >= 0, got {self.workers}"
            raise ConfigurationError(msg)
        if self.log_level not in _LOG_LEVELS:
            msg = (
                f"Unknown log_level {self.log_level!r}. "
                f"Expected one of: {', '.join(sorted(_LOG_LEVELS))}"
            )
            raise ConfigurationError(msg)

    @property
    def read_timeout(self) -> float | None:
        """Read timeout in seconds, or ``None`` when disabled."""
        if self.read_timeout_ms == 0:
            return None
        return self.read_timeout_ms / 1000

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        **overrides: Any,
    ) -> AppConfig:
        """Build a config from environment variables.

        Reads ``HOST``, ``PORT``, ``DEBUG``, ``WORKERS``, ``LOG_LEVEL``,
        ``MAX_BODY_BYTES``, ``READ_TIMEOUT_MS`` and ``BODY_POLICY``.
        Unset variables keep the field defaults; keyword *overrides*
        win over both.

        Raises:
            ConfigurationError: If a variable cannot be converted.
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}

        if "HOST" in env:
            values["host"] = env["HOST"]
        for var, field_name in (
            ("PORT", "port"),
            ("WORKERS", "workers"),
            ("MAX_BODY_BYTES", "max_body_bytes"),
            ("READ_TIMEOUT_MS", "read_timeout_ms"),
        ):
            if var in env:
                values[field_name] = _parse_int(var, env[var])
        if "DEBUG" in env:
            values["debug"] = env["DEBUG"].strip().lower() in ("1", "true", "yes", "on")
        if "LOG_LEVEL" in env:
            values["log_level"] = env["LOG_LEVEL"].strip().lower()
        if "BODY_POLICY" in env:
            raw = env["BODY_POLICY"].strip().lower()
            try:
                values["body_policy"] = BodyPolicy(raw)
            except ValueError:
                msg = f"BODY_POLICY must be 'lenient' or 'strict', got {raw!r}"
                raise ConfigurationError(msg) from None

        values.update(overrides)
        return cls(**values)


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw.strip())
    except ValueError:
        msg = f"{name} must be an integer, got {raw!r}"
        raise ConfigurationError(msg) from None
