"""Webhook server for the Airtable "Generate" button.

Run with: animate-generation  (or python -m animate_generation.webhook_server)
Then point an Airtable automation or Button field at POST /generate-animation
with a JSON body of {"recordId": "rec..."}.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from animate_generation.config import SERVICE_NAME, AnimateConfig
from animate_generation.pipeline import AnimationPipeline
from animate_generation.schemas import GenerateAccepted, GenerateRequest

logger = logging.getLogger(__name__)


def create_app(
    pipeline: Optional[AnimationPipeline] = None,
    config: Optional[AnimateConfig] = None,
) -> FastAPI:
    """Build the FastAPI app around a pipeline (built from the environment if not given)."""
    if pipeline is None:
        config = config or AnimateConfig.from_env()
        pipeline = AnimationPipeline(config)
    config = config or pipeline.config

    app = FastAPI(title=SERVICE_NAME)
    app.state.pipeline = pipeline
    # Strong references to running generations; nothing ever awaits them
    app.state.tasks = set()

    @app.get("/")
    async def health():
        """Health check endpoint."""
        return {
            "status": "online",
            "service": SERVICE_NAME,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "table": config.table_name,
            "mode_source": config.mode_source,
            "output_storage": config.output_storage,
        }

    @app.post("/generate-animation")
    async def generate_animation(payload: Optional[GenerateRequest] = None):
        """Acknowledge right away, then generate in the background."""
        record_id = payload.recordId if payload else None
        if not record_id:
            return JSONResponse(status_code=400, content={"error": "recordId is required"})

        logger.info(f"Received generation request for record: {record_id}")
        task = asyncio.create_task(app.state.pipeline.run(record_id))
        app.state.tasks.add(task)
        task.add_done_callback(app.state.tasks.discard)

        return GenerateAccepted(recordId=record_id)

    return app


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
    config = AnimateConfig.from_env()
    app = create_app(config=config)

    logger.info(f"{SERVICE_NAME} server running on port {config.port}")
    logger.info("Endpoints:")
    logger.info("  GET  / - Health check")
    logger.info("  POST /generate-animation - Generate animation")

    uvicorn.run(app, host="0.0.0.0", port=config.port)


if __name__ == "__main__":
    main()
