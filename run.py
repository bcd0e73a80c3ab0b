#!/usr/bin/env python3
"""
Run script for the SpeechCoach backend
"""
import uvicorn

from speechcoach.config.settings import settings
from speechcoach.main import app

if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port, reload=settings.debug)
