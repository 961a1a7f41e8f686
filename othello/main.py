import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from othello.config import settings
from othello.ws_handler import router as ws_router

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Othello Server")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(ws_router)


@app.get("/health")
async def health():
    return {"status": "ok"}
