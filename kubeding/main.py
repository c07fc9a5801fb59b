"""kube-ding - FastAPI application relaying Kubernetes events to DingTalk."""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

import uvicorn
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.concurrency import run_in_threadpool

from kubeding.config import get_settings
from kubeding.sinks.base import BaseSink, SinkConfigError
from kubeding.sinks.dingtalk import DingTalkSink
from kubeding.sinks.factory import create_sink
from kubeding.sources.base import BaseSource
from kubeding.sources.kubernetes import KubernetesSource

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Global sink instance
sink: BaseSink | None = None

# Source parsers registry
sources: dict[str, BaseSource] = {}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    global sink

    settings = get_settings()

    logging.getLogger().setLevel(settings.log_level.upper())

    sources["kubernetes"] = KubernetesSource()
    logger.info(f"Registered {len(sources)} source parser(s): {list(sources.keys())}")

    if not settings.sink:
        logger.error("No sink configured. Set the SINK environment variable or kube-ding.yaml.")
        sink = None
    else:
        try:
            sink = create_sink(settings.sink)
        except SinkConfigError as e:
            logger.error(f"Failed to create sink: {e}")
            sink = None

    logger.info("kube-ding started")

    yield

    if sink:
        sink.stop()
    sink = None
    sources.clear()
    logger.info("kube-ding stopped")


app = FastAPI(
    title="kube-ding",
    description="Relay for Kubernetes events to a DingTalk robot",
    version="0.1.0",
    lifespan=lifespan,
)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/sources")
async def list_sources() -> dict[str, list[str]]:
    """List registered event sources."""
    return {"sources": list(sources.keys())}


@app.get("/sink")
async def describe_sink() -> dict[str, Any]:
    """Describe the configured sink, without its token."""
    if not sink:
        return {"sink": None}

    info: dict[str, Any] = {"name": sink.name}
    if isinstance(sink, DingTalkSink):
        info["config"] = sink.config.model_dump(exclude={"token"})
    return {"sink": info}


@app.post("/webhook/{source_name}")
async def receive_events(source_name: str, request: Request) -> dict[str, Any]:
    """Receive a batch of events from a registered source and export it."""
    logger.info(f"Received webhook from source: {source_name}")

    if not sink:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Sink not configured. Check the SINK setting.",
        )

    source = sources.get(source_name)
    if not source:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown source: {source_name}",
        )

    try:
        payload = await request.json()
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Body is not valid JSON: {e}",
        )

    try:
        batch = source.parse(payload)
    except ValueError as e:
        logger.exception(f"Failed to parse {source_name} payload: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid payload: {e}",
        )

    logger.info(f"Parsed {source_name} webhook: events={len(batch.events)}")

    # delivery blocks, keep it off the event loop
    await run_in_threadpool(sink.export_events, batch)

    return {"status": "ok", "source": source_name, "events": len(batch.events)}


def run() -> None:
    """Run the application using uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "kubeding.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=False,
    )


if __name__ == "__main__":
    run()
