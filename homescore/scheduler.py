# homescore/scheduler.py
from apscheduler.schedulers.background import BackgroundScheduler
from .db import SessionLocal
from .services import check_all_prices
from .utils import logger

def build_scheduler(interval_hours: float, session_factory=SessionLocal) -> BackgroundScheduler:
    scheduler = BackgroundScheduler()
    scheduler.add_job(
        check_all_prices, "interval", hours=interval_hours,
        args=[session_factory], id="check_all_prices", max_instances=1, coalesce=True,
    )
    return scheduler

def start_scheduler(interval_hours: float) -> BackgroundScheduler:
    scheduler = build_scheduler(interval_hours)
    scheduler.start()
    logger.info("Scheduler started: price check every %s h", interval_hours)
    return scheduler
