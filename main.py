"""
MAIN.PY - Edge Scoring API

    uvicorn main:app --port 8000

Startup loads the edge scoring configuration once (EDGE_CONFIG_PATH or the
built-in unified preset). A broken config file fails startup with
EdgeConfigError instead of failing every request later.
"""

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from core.edge_config import load_edge_config
from core.structured_logging import RequestCorrelationMiddleware, configure_structured_logging
from env_config import Config
from metrics import get_metrics_response
from routers import scoring_router

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    configure_structured_logging(Config.LOG_LEVEL, Config.LOG_FORMAT)
    Config.log_status()

    app = FastAPI(title="Edge Scoring API", version=Config.API_VERSION)
    app.state.edge_config = load_edge_config(Config.EDGE_CONFIG_PATH)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestCorrelationMiddleware)
    app.include_router(scoring_router)

    @app.get("/health")
    def health():
        config = app.state.edge_config
        return {
            "status": "healthy",
            "api_version": Config.API_VERSION,
            "scoring_version": config.version,
            "max_score": config.max,
        }

    @app.get("/metrics")
    def metrics():
        body, content_type = get_metrics_response()
        return Response(content=body, media_type=content_type)

    logger.info("Edge Scoring API ready (scoring version %s)", app.state.edge_config.version)
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
