"""Pantry Chef HTTP service.

Single entry point for the recipe generation API:
- Builds the Gemini-backed recipe pipeline from configuration
- Uses the in-memory recipe repository for history, likes and dashboard
- Serves the REST API with uvicorn

Run with: python app.py
"""

import uvicorn

from pantry_chef.api.app import create_app
from pantry_chef.utils.config import config
from pantry_chef.utils.logger import logger


app = create_app()


if __name__ == "__main__":
    logger.info(f"Starting Pantry Chef on port {config.PORT}")
    logger.info(f"Generator model: {config.GEMINI_MODEL} (API key configured: {bool(config.GEMINI_API_KEY)})")
    logger.info(f"API docs available at: http://localhost:{config.PORT}/docs")
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
