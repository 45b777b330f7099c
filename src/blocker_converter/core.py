from __future__ import annotations

import json
import logging
import time
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence, Union

from .compaction import apply_css_exceptions, apply_domain_wildcards, compact_css_rules
from .config import CONVERTER_VERSION, AppConfig
from .converter import convert_rule
from .errors import ConversionError, ErrorCode, RuleConversionError
from .logging import ConversionSummary, RunLogEntry, RunLogger, StageTimings, append_summary_csv
from .models import (
    ActionType,
    ConversionBucket,
    ConversionResult,
    ConvertedRule,
    Diagnostic,
    FilterRule,
)
from .parser import parse_rule
from .utils import atomic_write, ensure_run_paths, generate_run_id, read_rule_lines, slugify

logger = logging.getLogger(__name__)

RuleInput = Union[str, FilterRule, None]


@dataclass(slots=True)
class FileConversionResult:
    run_id: str
    output_path: Path
    errors_path: Path | None
    result: ConversionResult
    summary: str


class ConversionService:
    def __init__(self, config: AppConfig | None = None) -> None:
        self._config = config or AppConfig()

    def convert_line(self, rule_text: str, errors: list[Diagnostic] | None = None) -> ConvertedRule | None:
        """Convert a single line; comments and failures give ``None``."""

        try:
            rule = parse_rule(rule_text)
            if rule is None:
                return None
            return convert_rule(rule)
        except RuleConversionError as exc:
            self._record_failure(rule_text, exc, errors)
            return None

    def convert_rule(self, rule: FilterRule, errors: list[Diagnostic] | None = None) -> ConvertedRule | None:
        try:
            return convert_rule(rule)
        except RuleConversionError as exc:
            self._record_failure(getattr(rule, "rule_text", repr(rule)), exc, errors)
            return None

    def convert_array(self, rules: Sequence[RuleInput] | None, limit: int | None = None) -> ConversionResult:
        """Convert rule texts or parsed rules into a content blocker JSON.

        ``limit`` falls back to the configured ceiling; zero or a negative
        value means no limit.
        """

        logger.info("Safari Content Blocker Converter v%s", CONVERTER_VERSION)
        if not rules:
            logger.error("Invalid argument rules")
            raise ConversionError("EMPTY_INPUT", "No rules to convert")

        bucket = self._convert_lines(rules)
        effective_limit = self._config.converter.limit if limit is None else limit
        return self._create_result(bucket, effective_limit)

    def convert_file(
        self,
        path: Path,
        *,
        output: Path | None = None,
        limit: int | None = None,
        run_id: str | None = None,
    ) -> FileConversionResult:
        run_id = run_id or generate_run_id()
        run_paths = ensure_run_paths(self._config, run_id)
        run_logger = RunLogger(run_paths.log_file)
        output_path = output or run_paths.base_dir / f"{slugify(path.stem)}.json"

        read_start = time.perf_counter()
        if not path.exists():
            raise ConversionError("NOT_FOUND", f"Rules file does not exist: {path}")
        try:
            lines = read_rule_lines(path)
        except UnicodeDecodeError as exc:
            raise ConversionError("INVALID_ENCODING", f"Rules file is not valid UTF-8: {path}") from exc
        read_ms = (time.perf_counter() - read_start) * 1000

        convert_start = time.perf_counter()
        try:
            result = self.convert_array(lines, limit=limit)
        except ConversionError as exc:
            run_logger.append(
                RunLogEntry(
                    run_id=run_id,
                    source=str(path),
                    status="failure",
                    error_code=exc.code,
                    rules_total=len(lines),
                    converted_count=0,
                    errors_count=0,
                    over_limit=False,
                    timings=StageTimings(read_ms, 0, 0),
                    output_path=str(output_path),
                )
            )
            raise
        convert_ms = (time.perf_counter() - convert_start) * 1000

        write_start = time.perf_counter()
        atomic_write(output_path, result.converted_json)
        errors_path: Path | None = None
        if result.errors:
            errors_path = output_path.with_suffix(".errors.txt")
            atomic_write(errors_path, "\n".join(str(item) for item in result.errors) + "\n")
        write_ms = (time.perf_counter() - write_start) * 1000

        run_logger.append(
            RunLogEntry(
                run_id=run_id,
                source=str(path),
                status="success",
                error_code=None,
                rules_total=len(lines),
                converted_count=result.converted_count,
                errors_count=result.error_count,
                over_limit=result.over_limit,
                timings=StageTimings(read_ms, convert_ms, write_ms),
                output_path=str(output_path),
            )
        )
        summary = ConversionSummary(
            total=len(lines),
            converted=result.converted_count,
            errors=result.error_count,
            over_limit=result.over_limit,
            error_codes=dict(Counter(item.code.value for item in result.errors)),
        )
        append_summary_csv(self._config.runtime.output_dir / self._config.runtime.summary_csv, summary.as_row(run_id))

        return FileConversionResult(
            run_id=run_id,
            output_path=output_path,
            errors_path=errors_path,
            result=result,
            summary=(
                f"Converted {path.name} -> {output_path}: "
                f"{result.converted_count} rules, {result.error_count} errors"
            ),
        )

    def _record_failure(
        self, rule_text: str, exc: RuleConversionError, errors: list[Diagnostic] | None
    ) -> None:
        logger.debug("Error converting rule from: %s cause: %s", rule_text, exc)
        if errors is not None:
            errors.append(Diagnostic(rule_text=rule_text, code=exc.code, message=str(exc)))

    def _convert_lines(self, rules: Sequence[RuleInput]) -> ConversionBucket:
        logger.info("Converting %d rules", len(rules))
        bucket = ConversionBucket()

        for rule in rules:
            if rule is None or isinstance(rule, str):
                item = self.convert_line(rule or "", bucket.errors)
            else:
                item = self.convert_rule(rule, bucket.errors)
            if item is None:
                continue
            self._classify(item, bucket)

        css_blocking = apply_css_exceptions(bucket.css_blocking, bucket.css_exceptions, bucket.errors)
        compacted = compact_css_rules(css_blocking, self._config.converter.max_selectors_per_wide_rule)
        bucket.css_blocking_wide = compacted.wide
        bucket.css_blocking_domain_sensitive = compacted.domain_sensitive

        logger.info(
            "Rules converted with %d errors. Basic rules: %d, elemhide rules (wide): %d, "
            "elemhide rules (domain-sensitive): %d, exceptions (elemhide): %d, exceptions (other): %d",
            len(bucket.errors),
            len(bucket.url_blocking),
            len(bucket.css_blocking_wide),
            len(bucket.css_blocking_domain_sensitive),
            len(bucket.css_elemhide),
            len(bucket.other),
        )
        return bucket

    def _classify(self, item: ConvertedRule, bucket: ConversionBucket) -> None:
        action_type = item.action.type
        if action_type is ActionType.BLOCK:
            bucket.url_blocking.append(item)
        elif action_type is ActionType.CSS_DISPLAY_NONE:
            bucket.css_blocking.append(item)
        elif action_type is ActionType.IGNORE_PREVIOUS_RULES:
            resource_types = item.trigger.resource_type
            if resource_types and resource_types[0] == "document":
                bucket.css_elemhide.append(item)
            elif item.action.selector:
                bucket.css_exceptions.append(item)
            else:
                bucket.other.append(item)
        else:
            raise ConversionError("INVALID_ACTION", f"Unexpected action type: {action_type!r}")

    def _create_result(self, bucket: ConversionBucket, limit: int | None) -> ConversionResult:
        converted = bucket.ordered()
        apply_domain_wildcards(converted)

        over_limit = False
        if limit and limit > 0 and len(converted) > limit:
            message = f"{limit} limit is achieved. Next rules will be ignored."
            bucket.errors.append(Diagnostic(rule_text="", code=ErrorCode.OVER_LIMIT, message=message))
            logger.error(message)
            over_limit = True
            converted = converted[:limit]

        logger.info("Content blocker length: %d", len(converted))
        payload = json.dumps(
            [rule.to_dict() for rule in converted],
            indent=self._config.converter.indent,
            ensure_ascii=False,
        )
        return ConversionResult(
            converted_count=len(converted),
            error_count=len(bucket.errors),
            over_limit=over_limit,
            converted_json=payload,
            errors=tuple(bucket.errors),
        )


def convert_array(
    rules: Sequence[RuleInput] | None,
    limit: int | None = None,
    *,
    config: AppConfig | None = None,
) -> ConversionResult:
    """Module-level shortcut for :meth:`ConversionService.convert_array`.

    Without an explicit config no limit applies unless one is passed.
    """

    service = ConversionService(config or AppConfig())
    if limit is None and config is None:
        limit = 0
    return service.convert_array(rules, limit=limit)


__all__ = [
    "ConversionError",
    "ConversionService",
    "FileConversionResult",
    "convert_array",
]
