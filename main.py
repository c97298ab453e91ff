import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from google.cloud import firestore

import config
from routers import about, contact, posts, projects

logger = logging.getLogger('uvicorn.error')


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application startup: Initializing resources...")
    if getattr(app.state, 'db', None) is None:
        try:
            app.state.db = firestore.AsyncClient()
            logger.info("Firestore Async client initialized.")
        except Exception as e:
            logger.error(f"Failed to initialize Firestore Async client: {e}")
            app.state.db = None

    yield
    logger.info("Application shutdown: Cleaning up resources...")
    if getattr(app.state, 'db', None):
        try:
            await app.state.db.close()
            logger.info("Firestore Async client closed.")
        except Exception as e:
            logger.error(f"Error closing Firestore client: {e}")


app = FastAPI(lifespan=lifespan)
app.include_router(posts.router)
app.include_router(projects.router)
app.include_router(about.router)
app.include_router(contact.router)

app.add_middleware(
    TrustedHostMiddleware, allowed_hosts=config.settings.allowed_hosts
)


@app.get("/health")
async def health():
    return {"status": "ok"}
