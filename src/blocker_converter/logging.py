from __future__ import annotations

import csv
import json
import time
from dataclasses import asdict, dataclass, field
from io import StringIO
from pathlib import Path
from typing import Any

from .utils import atomic_write


@dataclass(slots=True)
class StageTimings:
    read_ms: float
    convert_ms: float
    write_ms: float


@dataclass(slots=True)
class RunLogEntry:
    run_id: str
    source: str
    status: str
    error_code: str | None
    rules_total: int
    converted_count: int
    errors_count: int
    over_limit: bool
    timings: StageTimings
    output_path: str

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["timings"] = asdict(self.timings)
        return payload


class RunLogger:
    def __init__(self, log_file: Path) -> None:
        self._log_file = log_file

    def append(self, entry: RunLogEntry) -> None:
        self._log_file.parent.mkdir(parents=True, exist_ok=True)
        line = json.dumps(entry.to_dict(), ensure_ascii=False)
        with self._log_file.open("a", encoding="utf-8") as handle:
            handle.write(line + "\n")


@dataclass(slots=True)
class ConversionSummary:
    timestamp: float = field(default_factory=time.time)
    total: int = 0
    converted: int = 0
    errors: int = 0
    over_limit: bool = False
    error_codes: dict[str, int] = field(default_factory=dict)

    def as_row(self, run_id: str) -> list[str]:
        codes_json = json.dumps(self.error_codes, sort_keys=True)
        return [
            run_id,
            time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(self.timestamp)),
            str(self.total),
            str(self.converted),
            str(self.errors),
            str(self.over_limit).lower(),
            codes_json,
        ]


SUMMARY_HEADER = [
    "run_id",
    "timestamp",
    "total",
    "converted",
    "errors",
    "over_limit",
    "error_codes",
]


def append_summary_csv(path: Path, row: list[str]) -> None:
    header = SUMMARY_HEADER
    rows: list[list[str]] = []
    if path.exists():
        with path.open("r", encoding="utf-8", newline="") as handle:
            reader = list(csv.reader(handle))
        if reader:
            header = reader[0]
            rows = reader[1:]
    rows.append(row)
    write_summary_csv(path, header, rows)


def write_summary_csv(path: Path, header: list[str], rows: list[list[str]]) -> None:
    buffer = StringIO()
    writer = csv.writer(buffer)
    writer.writerow(header)
    writer.writerows(rows)
    atomic_write(path, buffer.getvalue())
