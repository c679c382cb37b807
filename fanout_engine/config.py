"""Fan-out engine configuration.

Two layers:

* :class:`Settings` -- process-level knobs loaded from environment variables
  with the ``FANOUT_`` prefix (and an optional ``.env`` file).
* :class:`RunConfig` -- the per-run connection bundle, target list, and
  concurrency bound, loaded from a JSON file by :func:`load_run_config`.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from fanout_engine.errors import ConfigError
from fanout_engine.output.csv_format import CsvQuoting
from fanout_engine.sql_toolkit import Dialect

logger = logging.getLogger(__name__)

DEFAULT_MAX_PARALLELISM = 5


class TargetSwitch(str, Enum):
    """How a session is pointed at a target.

    ``USE`` opens a connection to the server and issues ``USE <target>``;
    ``URL`` substitutes ``{target}`` into the connection string instead;
    ``AUTO`` picks ``URL`` when the connection string has the placeholder.
    """

    AUTO = "auto"
    USE = "use"
    URL = "url"


class Settings(BaseSettings):
    """Application settings loaded from environment variables with FANOUT_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="FANOUT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    debug: bool = False

    # SQL
    dialect: Dialect = Dialect.TSQL
    target_switch: TargetSwitch = TargetSwitch.AUTO

    # Output
    target_id_column: str = Field(default="TargetId", min_length=1)
    csv_quoting: CsvQuoting = CsvQuoting.LEGACY

    # Logging
    log_level: str = "INFO"
    structured_logging: bool = False

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        level = v.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return level


def load_settings(**overrides: object) -> Settings:
    """Load settings from environment, with optional overrides for testing."""
    settings = Settings(**overrides)  # type: ignore[arg-type]

    if settings.debug:
        logger.info("Loaded settings: dialect=%s quoting=%s", settings.dialect.value, settings.csv_quoting.value)

    return settings


# ---------------------------------------------------------------------------
# Run configuration
# ---------------------------------------------------------------------------

# Config keys are matched ignoring case and separators, so ``DatabaseList``,
# ``database_list`` and ``databaseList`` are the same key.
_KEY_ALIASES: dict[str, str] = {
    "connectionstring": "connection_string",
    "serverconnectionstring": "connection_string",
    "connectionurl": "connection_string",
    "targets": "targets",
    "databaselist": "targets",
    "databases": "targets",
    "maxparallelism": "max_parallelism",
    "parallelism": "max_parallelism",
}


def _canonical_key(key: str) -> str:
    flat = key.replace("_", "").replace("-", "").lower()
    return _KEY_ALIASES.get(flat, key)


class RunConfig(BaseModel):
    """Immutable description of one fan-out run."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    connection_string: SecretStr = Field(
        ...,
        description="Opaque connection URL; may contain a {target} placeholder.",
    )
    targets: tuple[str, ...] = Field(
        ...,
        min_length=1,
        description="Ordered target identifiers; the first one is the primary target.",
    )
    max_parallelism: int = Field(
        default=DEFAULT_MAX_PARALLELISM,
        ge=1,
        description="Maximum number of target executions in flight at once.",
    )

    @model_validator(mode="before")
    @classmethod
    def _normalise_keys(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {_canonical_key(str(k)): v for k, v in data.items()}
        return data

    @field_validator("connection_string", mode="before")
    @classmethod
    def _non_empty_connection(cls, v: Any) -> Any:
        raw = v.get_secret_value() if isinstance(v, SecretStr) else v
        if not isinstance(raw, str) or not raw.strip():
            raise ValueError("connection string must be a non-empty string")
        return v

    @field_validator("targets")
    @classmethod
    def _non_blank_targets(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        cleaned = tuple(t.strip() for t in v)
        if any(not t for t in cleaned):
            raise ValueError("target identifiers must not be blank")
        return cleaned

    @property
    def primary_target(self) -> str:
        return self.targets[0]


def load_run_config(path: Path, **overrides: object) -> RunConfig:
    """Read and validate a JSON run configuration file.

    *overrides* replace values from the file (e.g. a CLI ``--parallelism``
    flag); ``None`` overrides are ignored.

    Raises
    ------
    ConfigError
        If the file cannot be read, is not a JSON object, or fails validation.
    """
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Cannot read configuration file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Configuration file {path} is not valid JSON: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError(f"Configuration file {path} must contain a JSON object")

    data = {_canonical_key(str(k)): v for k, v in raw.items()}
    data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        config = RunConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration in {path}: {exc}") from exc

    logger.debug(
        "Loaded run configuration from %s: %d target(s), max_parallelism=%d",
        path,
        len(config.targets),
        config.max_parallelism,
    )
    return config
