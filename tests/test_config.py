import json

import pytest

from blocker_converter.config import (
    DEFAULT_RULE_LIMIT,
    AppConfig,
    dump_config,
    load_config,
)
from blocker_converter.settings import Settings, _parse_bool, load_effective_config


def write_config(tmp_path, body: str):
    path = tmp_path / "config.toml"
    path.write_text(body, encoding="utf-8")
    return path


def test_missing_file_gives_defaults(tmp_path) -> None:
    config = load_config(tmp_path / "absent.toml")
    assert config == AppConfig()
    assert config.converter.limit == DEFAULT_RULE_LIMIT
    assert config.converter.max_selectors_per_wide_rule == 250
    assert config.converter.indent == "\t"


def test_load_config_sections(tmp_path) -> None:
    path = write_config(
        tmp_path,
        """
[runtime]
output_dir = "out"
enable_local_api = true

[converter]
limit = 10
max_selectors_per_wide_rule = 5
indent = 2

[api]
port = 9000
""",
    )
    config = load_config(path)
    assert str(config.runtime.output_dir) == "out"
    assert config.runtime.enable_local_api is True
    assert config.runtime.log_file == "log.jsonl"
    assert config.converter.limit == 10
    assert config.converter.max_selectors_per_wide_rule == 5
    assert config.converter.indent == 2
    assert config.api.port == 9000
    assert config.api.host == "127.0.0.1"


def test_selector_cap_must_be_positive(tmp_path) -> None:
    path = write_config(tmp_path, "[converter]\nmax_selectors_per_wide_rule = 0\n")
    with pytest.raises(ValueError):
        load_config(path)


def test_dump_config_round_trips_values() -> None:
    payload = json.loads(dump_config(AppConfig()))
    assert payload["converter"] == {"limit": 50000, "max_selectors_per_wide_rule": 250, "indent": "\t"}
    assert payload["runtime"]["enable_local_api"] is False


def test_environment_overrides_api_switch(tmp_path) -> None:
    path = write_config(tmp_path, "[runtime]\nenable_local_api = false\n")
    config = load_effective_config(path, Settings(enable_local_api=True))
    assert config.runtime.enable_local_api is True

    config = load_effective_config(path, Settings())
    assert config.runtime.enable_local_api is False


def test_settings_config_path_is_used(tmp_path) -> None:
    path = write_config(tmp_path, "[converter]\nlimit = 3\n")
    assert load_effective_config(settings=Settings(config_path=path)).converter.limit == 3


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("1", True), ("Yes", True), ("off", False), ("maybe", None), (None, None)],
)
def test_parse_bool(raw, expected) -> None:
    assert _parse_bool(raw) is expected
