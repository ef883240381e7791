"""
Start the API with the host/port from settings.
Run from the backend/ directory: python run.py
"""
import uvicorn

from config import settings

if __name__ == "__main__":
    uvicorn.run("main:app", host=settings.host, port=settings.port, reload=True)
