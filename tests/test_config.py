from pathlib import Path

import pytest
import yaml

from fddi_cli.config import FDDIConfig, load_config, resolved_database_path, save_config


def test_load_config_defaults(tmp_path: Path) -> None:
    config_file = tmp_path / "fddi.yaml"
    config_file.write_text("", encoding="utf-8")

    config = load_config(config_file)

    assert config.tables == ["program", "project", "aspect"]
    assert config.indent == 2
    assert config.log_level == "WARNING"
    assert config.database_path == "fddi.db"
    assert resolved_database_path(config, config_file) == str(tmp_path / "fddi.db")


def test_load_config_from_yaml(tmp_path: Path) -> None:
    config_file = tmp_path / "fddi.yaml"
    with open(config_file, "w") as f:
        yaml.dump(
            {
                "database_path": "data/records.db",
                "tables": ["Project", "Feature"],
                "indent": None,
                "log_level": "debug",
            },
            f,
        )

    config = load_config(config_file)

    assert config.database_path == "data/records.db"
    assert resolved_database_path(config, config_file) == str(tmp_path / "data" / "records.db")
    assert config.tables == ["Project", "Feature"]
    assert config.indent is None
    assert config.log_level == "DEBUG"


def test_absolute_and_memory_paths_untouched(tmp_path: Path) -> None:
    config_file = tmp_path / "fddi.yaml"
    absolute = tmp_path / "elsewhere.db"
    config_file.write_text(f"database_path: {absolute}\n", encoding="utf-8")
    config = load_config(config_file)
    assert resolved_database_path(config, config_file) == str(absolute)

    config_file.write_text("database_path: ':memory:'\n", encoding="utf-8")
    config = load_config(config_file)
    assert resolved_database_path(config, config_file) == ":memory:"


def test_load_config_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        _ = load_config(tmp_path / "missing.yaml")


@pytest.mark.parametrize(
    "content",
    [
        "tables: [portfolio]\n",
        "tables: [progress]\n",
        "log_level: loud\n",
        "indent: -1\n",
        "- just\n- a list\n",
        "tables: [unclosed\n",
    ],
)
def test_load_config_rejects_bad_values(tmp_path: Path, content: str) -> None:
    config_file = tmp_path / "fddi.yaml"
    config_file.write_text(content, encoding="utf-8")

    with pytest.raises(ValueError):
        _ = load_config(config_file)


def test_save_config_round_trip(tmp_path: Path) -> None:
    config = FDDIConfig(database_path="/srv/fddi/records.db", tables=["project"], indent=4)
    config_file = tmp_path / "out" / "fddi.yaml"

    save_config(config, config_file)

    assert load_config(config_file) == config


def test_relative_path_survives_repeated_save_and_load(tmp_path: Path) -> None:
    config_file = tmp_path / "cfg" / "store.yaml"
    save_config(FDDIConfig(database_path="fddi.db"), config_file)

    first = load_config(config_file)
    save_config(first, config_file)
    second = load_config(config_file)

    assert second.database_path == "fddi.db"
    assert second == first
    assert resolved_database_path(second, config_file) == str(tmp_path / "cfg" / "fddi.db")
