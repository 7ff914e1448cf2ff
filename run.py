"""
Run the checklist API with uvicorn.
Usage: python3 run.py   (from the repository root; host/port from settings or env)
"""
import uvicorn

from config import settings

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
