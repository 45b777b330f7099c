from __future__ import annotations

import hashlib
import os
import re
import tempfile
import time
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import TypeVar

from .config import AppConfig

T = TypeVar("T")

SAFE_FILENAME_RE = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass(slots=True)
class RunPaths:
    run_id: str
    base_dir: Path
    log_file: Path


def slugify(value: str, max_length: int = 120) -> str:
    normalized = SAFE_FILENAME_RE.sub("-", value.strip())
    normalized = re.sub("-+", "-", normalized)
    normalized = normalized.replace("-.", ".")
    normalized = normalized.strip("-._")
    if not normalized:
        normalized = "rules"
    if len(normalized) > max_length:
        normalized = normalized[:max_length]
    return normalized


def generate_run_id(prefix: str = "run") -> str:
    epoch_ms = int(time.time() * 1000)
    random_bits = hashlib.sha256(os.urandom(16)).hexdigest()[:8]
    return f"{prefix}-{epoch_ms}-{random_bits}"


def ensure_run_paths(config: AppConfig, run_id: str) -> RunPaths:
    base = config.runtime.output_dir / run_id
    base.mkdir(parents=True, exist_ok=True)
    return RunPaths(
        run_id=run_id,
        base_dir=base,
        log_file=config.runtime.output_dir / config.runtime.log_file,
    )


def atomic_write(path: Path, data: str, encoding: str = "utf-8") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile("w", delete=False, dir=path.parent, encoding=encoding) as tmp:
        tmp.write(data)
        tmp.flush()
        os.fsync(tmp.fileno())
    os.replace(tmp.name, path)


def dedupe_keep_order(items: Iterable[T]) -> list[T]:
    seen: set[T] = set()
    result: list[T] = []
    for item in items:
        if item in seen:
            continue
        seen.add(item)
        result.append(item)
    return result


def read_rule_lines(path: Path) -> list[str]:
    """Read a filter list, one rule per line, dropping line endings only."""

    text = path.read_text(encoding="utf-8-sig")
    if not text:
        return []
    return [line.rstrip("\r") for line in text.split("\n")]
