from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping


CONFIG_FILE = Path("config.toml")

CONVERTER_VERSION = "1.2.0"

# Rule ceiling of a single Safari content blocker.
DEFAULT_RULE_LIMIT = 50000
MAX_SELECTORS_PER_WIDE_RULE = 250


@dataclass(slots=True)
class ConverterConfig:
    limit: int = DEFAULT_RULE_LIMIT
    max_selectors_per_wide_rule: int = MAX_SELECTORS_PER_WIDE_RULE
    indent: str | int | None = "\t"


@dataclass(slots=True)
class RuntimeConfig:
    output_dir: Path = Path("runs")
    log_file: str = "log.jsonl"
    summary_csv: str = "summary.csv"
    enable_local_api: bool = False


@dataclass(slots=True)
class APIConfig:
    host: str = "127.0.0.1"
    port: int = 8000


@dataclass(slots=True)
class AppConfig:
    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)
    converter: ConverterConfig = field(default_factory=ConverterConfig)
    api: APIConfig = field(default_factory=APIConfig)


def _read_toml(path: Path) -> Mapping[str, object]:
    if not path.exists():
        return {}
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _build_indent(value: object) -> str | int | None:
    if value is None or isinstance(value, (str, int)):
        return value
    raise TypeError(f"Unsupported indent configuration: {value!r}")


def _build_converter(data: Mapping[str, object] | None) -> ConverterConfig:
    if not data:
        return ConverterConfig()
    max_selectors = int(data.get("max_selectors_per_wide_rule", MAX_SELECTORS_PER_WIDE_RULE))
    if max_selectors < 1:
        raise ValueError("max_selectors_per_wide_rule must be positive")
    return ConverterConfig(
        limit=int(data.get("limit", DEFAULT_RULE_LIMIT)),
        max_selectors_per_wide_rule=max_selectors,
        indent=_build_indent(data.get("indent", "\t")),
    )


def _build_runtime(data: Mapping[str, object] | None) -> RuntimeConfig:
    if not data:
        return RuntimeConfig()
    return RuntimeConfig(
        output_dir=Path(str(data.get("output_dir", "runs"))),
        log_file=str(data.get("log_file", "log.jsonl")),
        summary_csv=str(data.get("summary_csv", "summary.csv")),
        enable_local_api=bool(data.get("enable_local_api", False)),
    )


def _build_api(data: Mapping[str, object] | None) -> APIConfig:
    if not data:
        return APIConfig()
    return APIConfig(host=str(data.get("host", "127.0.0.1")), port=int(data.get("port", 8000)))


def load_config(path: Path | None = None) -> AppConfig:
    path = path or CONFIG_FILE
    raw = _read_toml(path)
    runtime_data = raw.get("runtime") if isinstance(raw, Mapping) else None
    converter_data = raw.get("converter") if isinstance(raw, Mapping) else None
    api_data = raw.get("api") if isinstance(raw, Mapping) else None
    runtime = _build_runtime(runtime_data if isinstance(runtime_data, Mapping) else None)
    converter = _build_converter(converter_data if isinstance(converter_data, Mapping) else None)
    api = _build_api(api_data if isinstance(api_data, Mapping) else None)
    return AppConfig(runtime=runtime, converter=converter, api=api)


def dump_config(config: AppConfig) -> str:
    payload = {
        "runtime": {
            "output_dir": str(config.runtime.output_dir),
            "log_file": config.runtime.log_file,
            "summary_csv": config.runtime.summary_csv,
            "enable_local_api": config.runtime.enable_local_api,
        },
        "converter": {
            "limit": config.converter.limit,
            "max_selectors_per_wide_rule": config.converter.max_selectors_per_wide_rule,
            "indent": config.converter.indent,
        },
        "api": {
            "host": config.api.host,
            "port": config.api.port,
        },
    }
    return json.dumps(payload, indent=2)
