"""
FastAPI application entrypoint.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
import api.routes as routes
from api.routes import router, settings

logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL, logging.INFO))

@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # cancel the polling loop and release the camera
    routes.session.stop()

app = FastAPI(title="Moodcam Expression Detector API", version="1.0.0", lifespan=lifespan)
app.include_router(router)

@app.get("/health")
def health() -> dict:
    """
    Health check endpoint.

    Returns:
        dict: Simple status payload.
    """
    return {"status": "ok"}
