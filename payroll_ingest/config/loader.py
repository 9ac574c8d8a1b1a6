from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.fee_rule import AgeFeeRule
from ..services.age_fees import load_fee_table
from ..services.compensation import DEFAULT_HOLIDAY_PAY_RATE, DEFAULT_SOCIAL_FEE_RATE
from ..services.cost_centers import CostCenterDirectory

"""Config loader.

Responsibilities:
- Load YAML config (default config/import.yml)
- Validate against the JSON schema shipped next to this module
- Apply defaults and build the organisation settings (cost centers, fee table)
- Resolve the database DSN, with the environment taking precedence
"""

__all__ = [
    "SCHEMA_PATH",
    "DEFAULT_CONFIG_PATH",
    "ConfigError",
    "DatabaseConfig",
    "ImportConfig",
    "load_config",
    "resolve_dsn",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/import.yml")


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class DatabaseConfig:
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class ImportConfig:
    source_directory: str
    scan_limit: int = 5
    pad_rows: bool = False
    standard_social_fee_rate: float = DEFAULT_SOCIAL_FEE_RATE
    holiday_pay_rate: float = DEFAULT_HOLIDAY_PAY_RATE
    cost_centers: CostCenterDirectory = field(default_factory=lambda: CostCenterDirectory([]))
    age_based_fees: list[AgeFeeRule] = field(default_factory=list)
    tables: dict[str, str] = field(default_factory=dict)  # kind -> table, enables persistence
    database: DatabaseConfig = field(default_factory=DatabaseConfig)


def _validate_config_schema(data: Any) -> None:
    """Raise ConfigError when `data` does not satisfy the config schema."""
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    try:
        jsonschema.validate(data, schema)
    except ValidationError as e:
        where = "/".join(str(p) for p in e.absolute_path)
        raise ConfigError(f"config validation failed{f' at {where}' if where else ''}: {e.message}") from e


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> ImportConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e

    _validate_config_schema(data)

    db_raw = data.get("database") or {}
    return ImportConfig(
        source_directory=data["source_directory"],
        scan_limit=data.get("scan_limit", 5),
        pad_rows=data.get("pad_rows", False),
        standard_social_fee_rate=float(data.get("standard_social_fee_rate", DEFAULT_SOCIAL_FEE_RATE)),
        holiday_pay_rate=float(data.get("holiday_pay_rate", DEFAULT_HOLIDAY_PAY_RATE)),
        cost_centers=CostCenterDirectory.from_config(data.get("cost_centers")),
        age_based_fees=load_fee_table(data.get("age_based_fees")),
        tables=dict(data.get("tables") or {}),
        database=DatabaseConfig(
            host=db_raw.get("host"),
            port=db_raw.get("port"),
            user=db_raw.get("user"),
            password=db_raw.get("password"),
            database=db_raw.get("database"),
            dsn=db_raw.get("dsn"),
        ),
    )


def resolve_dsn(db: DatabaseConfig, environ: Mapping[str, str] | None = None) -> str:
    """Build a libpq DSN.

    Precedence: DATABASE_URL / PGDSN, then the config dsn, then individual
    PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE over the config values.
    """
    env = os.environ if environ is None else environ
    direct = env.get("DATABASE_URL") or env.get("PGDSN") or db.dsn
    if direct:
        return direct
    host = env.get("PGHOST", db.host or "localhost")
    port = env.get("PGPORT", str(db.port) if db.port else "5432")
    user = env.get("PGUSER", db.user or "postgres")
    password = env.get("PGPASSWORD", db.password or "")
    database = env.get("PGDATABASE", db.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn
