#!/usr/bin/env python3
"""
Entry point for the QuickCourt application.
"""

import uvicorn

from quickcourt.config import API_HOST, API_PORT, API_RELOAD, LOG_LEVEL

if __name__ == "__main__":
    uvicorn.run(
        "quickcourt.main:app",
        host=API_HOST,
        port=API_PORT,
        reload=API_RELOAD,
        log_level=LOG_LEVEL.lower(),
    )
