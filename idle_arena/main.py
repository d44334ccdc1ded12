import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from idle_arena import __version__
from idle_arena.config import settings
from idle_arena.routers import combat

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title=settings.app_name,
    description="Deterministic combat resolution and combat log storage for an idle RPG",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(combat.router)


@app.get("/health")
async def health_check():
    return {"status": "ok"}
