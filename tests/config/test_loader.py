from __future__ import annotations

import json

import pytest
import yaml

from job_ingest.config import ConfigRepository, load_config


def test_repository_loads_yaml_from_data_dir(temp_config_repository: ConfigRepository) -> None:
    data_dir = temp_config_repository.locator.data_dir
    (data_dir / "jobs.yaml").write_text(
        yaml.safe_dump(
            {
                "defaults": {"requestDelayMs": 250},
                "database": {"path": "../tmp/jobs.sqlite"},
                "queries": [{"keywords": ["python"], "providers": ["indeed"]}],
            }
        ),
        encoding="utf-8",
    )

    config = temp_config_repository.load()

    assert temp_config_repository.config_path == data_dir / "jobs.yaml"
    assert config.defaults.request_delay_ms == 250
    assert config.queries[0].keywords == ("python",)
    assert temp_config_repository.database_path(config) == (
        temp_config_repository.locator.project_root / "tmp" / "jobs.sqlite"
    ).resolve()
    assert temp_config_repository.load() is config


def test_repository_falls_back_to_json(temp_config_repository: ConfigRepository) -> None:
    data_dir = temp_config_repository.locator.data_dir
    (data_dir / "jobs.json").write_text(
        json.dumps({"queries": [{"keywords": ["go"], "locations": ["Remote"]}]}),
        encoding="utf-8",
    )

    config = temp_config_repository.load()

    assert temp_config_repository.config_path.name == "jobs.json"
    assert config.queries[0].locations == ("Remote",)


def test_missing_config_raises(temp_config_repository: ConfigRepository) -> None:
    assert temp_config_repository.config_path.name == "jobs.yaml"
    with pytest.raises(FileNotFoundError):
        temp_config_repository.load()


def test_non_mapping_document_is_rejected(tmp_path) -> None:
    path = tmp_path / "jobs.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_config(path)


def test_locator_honours_home_env(temp_config_repository: ConfigRepository, tmp_path) -> None:
    locator = temp_config_repository.locator
    assert locator.project_root == tmp_path.resolve()
    assert locator.logs_dir == (tmp_path / "logs").resolve()
