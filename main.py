from fastapi import FastAPI, HTTPException

from blocker_converter.api import create_app
from blocker_converter.config import CONVERTER_VERSION

try:
    app = create_app(require_enabled=True)
except RuntimeError:
    app = FastAPI(title="Content Blocker Converter", version=CONVERTER_VERSION)

    @app.get("/")
    async def api_disabled() -> dict[str, str]:
        raise HTTPException(
            status_code=503,
            detail="Local API disabled. Enable by setting enable_local_api = true in config.toml",
        )
