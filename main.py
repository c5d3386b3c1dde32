"""
Entry point for the mistake-tracker service.

Run with:
    uvicorn main:app --reload --port 8100
    python main.py
"""
import uvicorn

from config import get_settings
from mistake_tracker.api.main import create_app
from mistake_tracker.logging_setup import configure_logging

settings = get_settings()
configure_logging(settings)

app = create_app(settings)

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
        log_level=settings.log_level.lower(),
    )
