"""Unit tests for IndexConfig."""

import pytest

from rid_index.core.config import IndexConfig, load_config


def test_defaults_are_valid():
    config = IndexConfig()
    config.validate()
    assert config.chunk_size == 50_000
    assert config.staleness == "warn"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"chunk_size": 0},
        {"sort_buffer_records": -1},
        {"compress_level": 10},
        {"staleness": "never"},
        {"index_suffix": ""},
    ],
)
def test_invalid_values(kwargs):
    with pytest.raises(ValueError):
        IndexConfig(**kwargs).validate()


def test_from_dict_rejects_unknown_keys():
    with pytest.raises(ValueError, match="records_per_chunk"):
        IndexConfig.from_dict({"records_per_chunk": 10})


def test_load_config_from_toml(temp_dir):
    path = temp_dir / "rid.toml"
    path.write_text('[rid_index]\nchunk_size = 1000\nstaleness = "rebuild"\n', encoding="utf-8")

    config = load_config(path)
    assert config.chunk_size == 1000
    assert config.staleness == "rebuild"
    assert config.index_suffix == ".ridx"


def test_load_config_without_table(temp_dir):
    path = temp_dir / "empty.toml"
    path.write_text("[other]\nx = 1\n", encoding="utf-8")
    assert load_config(path) == IndexConfig()


def test_load_config_missing_file(temp_dir):
    with pytest.raises(FileNotFoundError):
        load_config(temp_dir / "nope.toml")
