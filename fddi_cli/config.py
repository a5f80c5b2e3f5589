"""Store configuration with YAML support."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import Field, field_validator

from fddi_core.schemas import BaseSchema, resolve_record_type


class FDDIConfig(BaseSchema):
    """Settings for the command line tools."""

    # SQLite file holding the record tables
    database_path: str = "fddi.db"

    # Record types whose tables are registered when the store is opened
    tables: list[str] = Field(default_factory=lambda: ["program", "project", "aspect"])

    # Indentation for JSON printed to the terminal; None prints one line per record
    indent: int | None = Field(default=2, ge=0)

    log_level: str = "WARNING"

    @field_validator("tables")
    @classmethod
    def tables_are_persistable(cls, value: list[str]) -> list[str]:
        for name in value:
            record_type = resolve_record_type(name)
            if record_type.table_name is None:
                raise ValueError(f"{record_type.__name__} records cannot be stored in a table")
        return value

    @field_validator("log_level")
    @classmethod
    def known_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return level


def load_config(yaml_path: str | Path) -> FDDIConfig:
    """Load store configuration from YAML file.

    Args:
        yaml_path: Path to YAML configuration file

    Returns:
        FDDIConfig instance

    Raises:
        FileNotFoundError: If YAML file doesn't exist
        ValueError: If YAML is invalid or has bad values
    """
    yaml_path = Path(yaml_path)

    if not yaml_path.exists():
        raise FileNotFoundError(f"Config file not found: {yaml_path}")

    with open(yaml_path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {yaml_path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected a mapping in {yaml_path}")

    try:
        return FDDIConfig.from_dict(data)
    except Exception as e:
        raise ValueError(f"Invalid configuration in {yaml_path}: {e}") from e


def resolved_database_path(config: FDDIConfig, yaml_path: str | Path) -> str:
    """Database path of ``config``, relative paths taken from the YAML file's directory."""
    if config.database_path == ":memory:" or Path(config.database_path).is_absolute():
        return config.database_path
    return str(Path(yaml_path).parent / config.database_path)


def save_config(config: FDDIConfig, yaml_path: str | Path) -> None:
    """Save store configuration to YAML file.

    Args:
        config: FDDIConfig to save
        yaml_path: Path where to save YAML file
    """
    yaml_path = Path(yaml_path)
    yaml_path.parent.mkdir(parents=True, exist_ok=True)

    data = config.to_dict()

    with open(yaml_path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False, indent=2)
