import logging
import time

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import OperationalError

from canvas_mermaid.api.routes import router
from canvas_mermaid.config import CORS_ORIGINS, LOG_LEVEL
from canvas_mermaid.db.models import Base
from canvas_mermaid.db.session import engine

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Canvas to Mermaid",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.on_event("startup")
def startup():
    retries = 5
    delay = 2

    for attempt in range(retries):
        try:
            Base.metadata.create_all(bind=engine)
            logger.info("Database connected")
            return
        except OperationalError:
            logger.info("Waiting for database... (%d/%d)", attempt + 1, retries)
            time.sleep(delay)

    # Conversions still work without the run log
    logger.warning("Database not ready, running without persistence")
