#!/usr/bin/env python3
"""Run the assistant core API server."""
import os

import uvicorn

from src.api.dependencies import get_config

if __name__ == "__main__":
    config = get_config()
    uvicorn.run(
        "src.main:app",
        host=config.server.host,
        port=config.server.port,
        log_level=config.log_level.lower(),
        reload=os.getenv("RELOAD", "1") != "0",
    )
