import os
from contextlib import asynccontextmanager
from fastapi import FastAPI
from homescore.db import Base, engine
import homescore.models  # noqa: F401 ensure models are imported so tables are known
from homescore.api.routes import router as api_router
from homescore.scheduler import start_scheduler
from homescore.utils import logger

PRICE_CHECK_INTERVAL_HOURS = float(os.getenv("PRICE_CHECK_INTERVAL_HOURS", "0"))


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Ensure database tables are created on startup
    Base.metadata.create_all(bind=engine)
    scheduler = None
    if PRICE_CHECK_INTERVAL_HOURS > 0:
        scheduler = start_scheduler(PRICE_CHECK_INTERVAL_HOURS)
    else:
        logger.info("Price check scheduler disabled")
    try:
        yield
    finally:
        if scheduler is not None:
            scheduler.shutdown(wait=False)


# create FastAPI instance
app = FastAPI(title="homescore", lifespan=lifespan)
app.include_router(api_router)
