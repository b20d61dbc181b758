#!/usr/bin/env python3
"""
Run script for the Call QA Analyzer
"""
import uvicorn

from callqa.config.settings import settings
from callqa.main import app

if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port, reload=settings.debug)
