"""FastAPI entrypoint for instruction, history and config endpoints."""

from __future__ import annotations

import logging
import os
from dataclasses import asdict
from typing import Any

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from docs_agent.agent.dispatcher import Dispatcher, build_dispatcher
from docs_agent.config import AgentConfig, AgentSettings
from docs_agent.document.editor import build_context
from docs_agent.obs.logging import setup_logging
from docs_agent.obs.tracing import TraceBuffer
from docs_agent.storage.settings_store import SQLiteSettingsStore

LOGGER = logging.getLogger(__name__)


def _load_settings() -> AgentSettings:
    db_path = os.getenv("DOCS_AGENT_SETTINGS_DB")
    if db_path:
        settings = SQLiteSettingsStore(db_path).load_settings()
        if settings.api_key.get_secret_value():
            return settings
    return AgentSettings.from_env()


class InstructionRequest(BaseModel):
    instruction: str = Field(min_length=1)
    selection: str = ""
    content: str = ""
    document_id: str = ""
    document_name: str = ""


setup_logging(logging.INFO)

app = FastAPI(title="Docs Agent", version="0.1.0")

_config = AgentConfig()
_settings = _load_settings()
_trace_buffer = TraceBuffer()
_dispatcher: Dispatcher = build_dispatcher(_settings, config=_config)
_dispatcher.registry.set_observer(_trace_buffer)


@app.get("/health")
def health() -> dict[str, Any]:
    return {
        "status": "ok",
        "provider": _settings.provider,
        "provider_configured": _dispatcher.provider is not None,
        "history_count": len(_dispatcher.log),
    }


@app.post("/instructions")
def instructions(request: InstructionRequest) -> dict[str, Any]:
    context = build_context(
        request.selection,
        request.content,
        max_content_length=_dispatcher.config.max_content_length,
        doc_id=request.document_id,
        name=request.document_name,
    )
    result = _dispatcher.process_instruction(request.instruction, context)
    return result.model_dump()


@app.get("/history")
def history(limit: int = 10) -> dict[str, Any]:
    if limit < 1:
        raise HTTPException(status_code=400, detail="limit must be at least 1")
    return {"items": [record.as_dict() for record in _dispatcher.log.recent(limit)]}


@app.delete("/history")
def clear_history() -> dict[str, Any]:
    _dispatcher.log.clear()
    return {"cleared": True}


@app.get("/tools")
def tools() -> dict[str, Any]:
    return {"items": _dispatcher.registry.describe()}


@app.get("/config")
def config() -> dict[str, Any]:
    if _dispatcher.provider is None:
        return {"provider": _settings.status(), "client": None}
    return {"provider": _settings.status(), "client": _dispatcher.provider.get_config()}


@app.post("/config/test")
def test_connection() -> dict[str, Any]:
    if _dispatcher.provider is None:
        raise HTTPException(status_code=400, detail=_dispatcher.unavailable_reason)
    return _dispatcher.provider.test_connection()


@app.get("/config/models")
def models() -> dict[str, Any]:
    if _dispatcher.provider is None:
        raise HTTPException(status_code=400, detail=_dispatcher.unavailable_reason)
    return {"items": _dispatcher.provider.get_available_models()}


@app.get("/traces")
def traces(limit: int = 20) -> dict[str, Any]:
    return {"items": [asdict(trace) for trace in _trace_buffer.list_recent(limit=limit)]}


@app.get("/metrics")
def metrics() -> dict[str, Any]:
    return _trace_buffer.summary()
