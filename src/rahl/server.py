"""
RAHL API server: FastAPI host around the capability registry.

Endpoints:
    GET  /health                          Liveness probe
    GET  /api/status                      Service and registry status
    GET  /api/capabilities                List registered capabilities
    POST /api/detect                      Detect a capability from free text
    POST /api/execute                     Execute a capability by name
    POST /api/capabilities/{name}/execute Execute a capability by path name
    POST /api/chat                        Detect, then execute or reply
    GET  /api/metrics                     Capability metrics
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from rahl import __version__
from rahl.capabilities import (
    CapabilityExecutionError,
    CapabilityNotFoundError,
    CapabilityRegistry,
    load_registry,
    set_registry,
)
from rahl.config import RahlConfig, load_config
from rahl.metrics import get_metrics

logger = logging.getLogger("rahl.server")

# ---------------------------------------------------------------------------
# Global state
# ---------------------------------------------------------------------------
_config: RahlConfig | None = None
_registry: CapabilityRegistry | None = None
_metrics = get_metrics()


# ---------------------------------------------------------------------------
# Request helpers
# ---------------------------------------------------------------------------

async def _json_body(request: Request) -> dict[str, Any]:
    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(400, "Request body must be JSON") from None
    if not isinstance(body, dict):
        raise HTTPException(400, "Request body must be a JSON object")
    return body


def _options(body: dict[str, Any]) -> dict[str, Any]:
    options = body.get("options")
    if options is None:
        return {}
    if not isinstance(options, dict):
        raise HTTPException(400, "'options' must be an object")
    return options


async def _run(name: str, input: Any, options: dict[str, Any]) -> Any:
    """Execute through the registry, recording metrics around the call."""
    if name not in _registry:
        _metrics.record_not_found(name)
        raise CapabilityNotFoundError(name)

    start = time.monotonic()
    try:
        return await _registry.execute(name, input, options)
    except CapabilityExecutionError:
        _metrics.record_failure(name)
        raise
    finally:
        _metrics.record_call(name, time.monotonic() - start)


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    global _config, _registry

    _config = load_config()
    logging.basicConfig(level=getattr(logging, _config.log_level, logging.INFO))

    _registry = load_registry(_config)
    set_registry(_registry)
    logger.info(f"RAHL starting with {_registry.count()} capabilities: {_registry.names()}")
    if _registry.load_errors:
        logger.warning(f"Capabilities skipped at startup: {list(_registry.load_errors)}")

    logger.info(f"RAHL ready on {_config.host}:{_config.port}")
    yield


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------

def create_app() -> FastAPI:
    app = FastAPI(
        title="RAHL",
        version=__version__,
        description="Capability registry and chat router",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"], allow_methods=["*"], allow_headers=["*"],
    )

    @app.exception_handler(CapabilityNotFoundError)
    async def not_found_handler(request: Request, exc: CapabilityNotFoundError):
        return JSONResponse(
            status_code=404,
            content={"error": "unknown capability", "capability": exc.capability, "message": exc.message},
        )

    @app.exception_handler(CapabilityExecutionError)
    async def execution_error_handler(request: Request, exc: CapabilityExecutionError):
        return JSONResponse(
            status_code=502,
            content={"error": exc.message, "capability": exc.capability, "detail": exc.detail},
        )

    # ==================================================================
    # Health
    # ==================================================================

    @app.get("/health")
    async def liveness():
        return {"status": "OK", "message": "RAHL AI is running"}

    @app.get("/api/status")
    async def status():
        return {
            "service": "rahl",
            "version": __version__,
            "capabilities": {
                "count": _registry.count(),
                "names": _registry.names(),
                "load_errors": _registry.load_errors,
            },
            "metrics": _metrics.get_summary(),
        }

    # ==================================================================
    # Capabilities
    # ==================================================================

    @app.get("/api/capabilities")
    async def list_capabilities():
        return {"capabilities": _registry.list().to_list()}

    @app.post("/api/detect")
    async def detect(request: Request):
        body = await _json_body(request)
        text = body.get("text")
        if not isinstance(text, str):
            raise HTTPException(400, "'text' must be a string")
        name = _registry.detect(text)
        _metrics.record_detection(name)
        return {"capability": name, "registered": name is not None and name in _registry}

    @app.post("/api/execute")
    async def execute(request: Request):
        body = await _json_body(request)
        name = body.get("capability")
        if not isinstance(name, str) or not name:
            raise HTTPException(400, "'capability' is required")
        result = await _run(name, body.get("input"), _options(body))
        return {"capability": name, "result": result}

    @app.post("/api/capabilities/{name}/execute")
    async def execute_named(name: str, request: Request):
        body = await _json_body(request)
        result = await _run(name, body.get("input"), _options(body))
        return {"capability": name, "result": result}

    # ==================================================================
    # Chat
    # ==================================================================

    @app.post("/api/chat")
    async def chat(request: Request):
        body = await _json_body(request)
        message = body.get("message")
        if not isinstance(message, str) or not message.strip():
            raise HTTPException(400, "'message' is required")

        options = _options(body)

        name = _registry.detect(message)
        _metrics.record_detection(name)
        if name is None or name not in _registry:
            if name is not None:
                logger.debug(f"Detected '{name}' but it is not registered")
            return {"reply": _config.fallback_reply, "capability": None, "result": None}

        try:
            result = await _run(name, message, options)
        except CapabilityExecutionError:
            raise
        except Exception as e:
            logger.error(f"Chat request failed: {e}", exc_info=True)
            raise HTTPException(500, str(e)) from None

        return {"reply": _reply_text(result), "capability": name, "result": result}

    # ==================================================================
    # Observability
    # ==================================================================

    @app.get("/api/metrics")
    async def metrics():
        return _metrics.get_summary()

    return app


def _reply_text(result: Any) -> str:
    if isinstance(result, dict):
        if result.get("success") is False and result.get("error"):
            return f"Sorry, that didn't work: {result['error']}"
        for key in ("formatted", "summary", "result", "text", "output"):
            if key in result and result[key] is not None:
                return str(result[key])
    return str(result)
