import logging

from fastapi import FastAPI

from backend.app import config
from backend.app.api.v1.router import router as v1_router

logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s %(message)s")

app = FastAPI(title="PO RECEIVING", version="0.1.0")
app.include_router(v1_router, prefix="/v1")
