#!/usr/bin/env python3
# backend/run.py
"""
Development server runner.

Creates any missing tables first, then serves the API with autoreload.
Set IS_TESTING=true to point it at TEST_DATABASE_URL instead.
"""
import logging
import os
from pathlib import Path
import sys

# Add backend to path
backend_dir = Path(__file__).parent
sys.path.insert(0, str(backend_dir))
os.chdir(backend_dir)

import uvicorn

from tourhub.init_db import init_db

logger = logging.getLogger("tourhub.run")

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    init_db()
    logger.info("Starting development server at http://localhost:8000 (docs at /docs)")

    uvicorn.run(
        "tourhub.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=True,
        log_level="info",
    )
