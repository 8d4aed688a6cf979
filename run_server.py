#!/usr/bin/env python3
"""Development server for the bio generator page."""

import os

import uvicorn

if __name__ == "__main__":
    uvicorn.run(
        "bio_generator.api.app:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("RELOAD", "").lower() in {"1", "true", "yes"},
        log_level="info",
    )
