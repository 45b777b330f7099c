from __future__ import annotations

import asyncio
from pathlib import Path

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from .config import CONVERTER_VERSION
from .core import ConversionError, ConversionService
from .settings import load_effective_config


class ConvertRequest(BaseModel):
    rules: list[str]
    limit: int | None = None


class RuleError(BaseModel):
    code: str
    rule: str
    message: str


class ConvertResponse(BaseModel):
    convertedCount: int
    errorsCount: int
    overLimit: bool
    converted: str
    errors: list[RuleError]


class HealthStatus(BaseModel):
    status: str
    version: str


def create_app(config_path: Path | None = None, *, require_enabled: bool = True) -> FastAPI:
    config = load_effective_config(config_path)
    if require_enabled and not config.runtime.enable_local_api:
        raise RuntimeError("Local API is disabled. Enable it via config.runtime.enable_local_api")
    service = ConversionService(config)
    app = FastAPI(title="Content Blocker Converter", version=CONVERTER_VERSION)

    @app.get("/health")
    def health() -> HealthStatus:
        return HealthStatus(status="ok", version=CONVERTER_VERSION)

    @app.post("/convert")
    async def convert(request: ConvertRequest) -> ConvertResponse:
        try:
            result = await asyncio.to_thread(service.convert_array, request.rules, request.limit)
        except ConversionError as exc:
            raise HTTPException(status_code=400, detail=exc.code) from exc
        return ConvertResponse(
            **result.to_dict(),
            errors=[
                RuleError(code=item.code.value, rule=item.rule_text, message=item.message)
                for item in result.errors
            ],
        )

    return app


__all__ = ["ConvertRequest", "ConvertResponse", "create_app"]
