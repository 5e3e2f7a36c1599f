import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request

from thesislens.config import get_settings
from thesislens.middlewares import log_error, log_request
from thesislens.routers import articles, chat, ping, pipeline, reports, taxonomy, workspace
from thesislens.services.llm.factory import make_llm_gateway
from thesislens.services.workspace.controller import WorkspaceController

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan for the API.
    """
    logger.info("Starting ThesisLens API...")

    app.state.settings = settings
    gateway = make_llm_gateway()
    app.state.controller = WorkspaceController(gateway, settings=settings)
    logger.info(f"Workspace ready (model={gateway.default_model})")

    yield

    logger.info("API shutdown complete")


app = FastAPI(
    title="ThesisLens",
    description="Thesis research assistant: classify, tag, and interrogate a library of papers.",
    version=settings.app_version,
    lifespan=lifespan,
)


@app.middleware("http")
async def request_logging(request: Request, call_next):
    try:
        response = await call_next(request)
    except Exception as e:
        log_error(str(e), request.method, request.url.path)
        raise
    log_request(request.method, request.url.path, response.status_code)
    return response


app.include_router(ping.router, prefix="/api/v1")
app.include_router(pipeline.router, prefix="/api/v1")
app.include_router(articles.router, prefix="/api/v1")
app.include_router(taxonomy.router, prefix="/api/v1")
app.include_router(reports.router, prefix="/api/v1")
app.include_router(chat.router, prefix="/api/v1")
app.include_router(workspace.router, prefix="/api/v1")


if __name__ == "__main__":
    uvicorn.run(app, port=8000, host="0.0.0.0")
