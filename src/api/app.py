from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
import json
from typing import Any, AsyncIterator, Callable

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError

from src.api.schemas import CountryIn, CountryOut, CountryPatch
from src.countries.errors import CountryError
from src.countries.scenarios import CountryScenarios
from src.countries.storage import CountryStorage
from src.utils.config import load_api_config, load_db_config, load_pool_config
from src.utils.db import Database
from src.utils.logging import get_logger, setup_logging


logger = get_logger(component="api")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    setup_logging()
    db = Database(load_db_config(), load_pool_config())
    try:
        await asyncio.to_thread(db.ping)
        logger.info("db_reachable")
    except Exception as e:
        # Keep serving; /api/health reports the outage and requests fail with 500.
        logger.warning("db_unreachable", err=str(e))
    app.state.db = db
    app.state.scenarios = CountryScenarios(CountryStorage(db))
    try:
        yield
    finally:
        db.close()


_api_config = load_api_config()
app = FastAPI(title=_api_config.title, version=_api_config.version, lifespan=lifespan)


def get_db(request: Request) -> Database:
    return request.app.state.db


def get_scenarios(request: Request) -> CountryScenarios:
    return request.app.state.scenarios


def _error(status_code: int, error: str, message: str) -> HTTPException:
    return HTTPException(status_code=status_code, detail={"error": error, "message": message})


async def _call(fn: Callable[..., Any], *args: Any) -> Any:
    """Run a blocking scenario call on a worker thread and translate its failures to HTTP."""
    try:
        return await asyncio.to_thread(fn, *args)
    except CountryError as e:
        raise _error(e.status_code, e.kind.value, e.message)
    except Exception:
        logger.exception("request_failed", op=getattr(fn, "__name__", str(fn)))
        raise _error(500, "internal_error", "Internal Server Error")


async def _read_json(request: Request) -> Any:
    raw = await request.body()
    if not raw.strip():
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return None


def _out(country: Any) -> dict[str, Any]:
    return CountryOut.from_country(country).model_dump(by_alias=True)


@app.get("/api")
async def api_status(request: Request) -> dict:
    return {
        "status": "server is running",
        "host": request.url.hostname,
        "protocol": request.url.scheme,
    }


@app.get("/api/ping")
async def api_ping() -> dict:
    return {"status": "pong"}


@app.get("/api/health")
async def health(db: Database = Depends(get_db)) -> Any:
    try:
        ok = await asyncio.to_thread(db.ping)
        return {"ok": True, "db": ok}
    except Exception as e:
        return JSONResponse(status_code=500, content={"ok": False, "error": str(e)})


@app.get("/api/country")
async def list_countries(scenarios: CountryScenarios = Depends(get_scenarios)) -> list[dict[str, Any]]:
    countries = await _call(scenarios.list_all)
    return [_out(c) for c in countries]


@app.get("/api/country/{code}")
async def get_country(code: str, scenarios: CountryScenarios = Depends(get_scenarios)) -> dict[str, Any]:
    country = await _call(scenarios.get, code)
    return _out(country)


@app.post("/api/country", status_code=204)
async def store_country(request: Request, scenarios: CountryScenarios = Depends(get_scenarios)) -> Response:
    data = await _read_json(request)
    if not isinstance(data, dict):
        raise _error(400, "invalid_data", "request body must be a JSON object")

    try:
        body = CountryIn.model_validate(data)
    except ValidationError as e:
        missing = sorted(str(err["loc"][0]) for err in e.errors() if err["type"] == "missing")
        if missing:
            raise _error(400, "missing_fields", f"missing required fields: {', '.join(missing)}")
        raise _error(400, "invalid_data", "; ".join(f"{err['loc'][0]}: {err['msg']}" for err in e.errors()))

    await _call(scenarios.store, body.to_country())
    return Response(status_code=204)


@app.patch("/api/country/{code}")
async def patch_country(code: str, request: Request, scenarios: CountryScenarios = Depends(get_scenarios)) -> dict[str, Any]:
    data = await _read_json(request)
    if not isinstance(data, dict) or not data:
        raise _error(400, "empty_body", "no data to update")

    try:
        body = CountryPatch.model_validate(data)
    except ValidationError as e:
        raise _error(400, "invalid_data", "; ".join(f"{err['loc'][0]}: {err['msg']}" for err in e.errors()))

    country = await _call(scenarios.patch, code, body.model_dump(exclude_none=True))
    return _out(country)


@app.delete("/api/country/{code}", status_code=204)
async def delete_country(code: str, scenarios: CountryScenarios = Depends(get_scenarios)) -> Response:
    await _call(scenarios.delete, code)
    return Response(status_code=204)
