"""Daily scheduling of the payment reminder batch."""

import logging

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger

from .config import Config, load_config
from .workflows import handle_reminder_request

logger = logging.getLogger(__name__)


def parse_reminder_time(value: str) -> tuple[int, int]:
    """Parse "HH:MM" into (hour, minute)."""
    hour, minute = map(int, value.split(":"))
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise ValueError(f"Out of range time: {value}")
    return hour, minute


def run_scheduled_reminders(config: Config) -> dict:
    """One automatic (idempotent) run, as the scheduler invokes it."""
    logger.info("Running scheduled payment reminders")
    status_code, result = handle_reminder_request({"automatic": True}, config)
    if status_code != 200:
        logger.error(f"Scheduled reminder run failed: {result.get('error')}")
    return result


def setup_scheduler(config: Config | None = None) -> BlockingScheduler:
    """Set up the daily reminder job."""
    if config is None:
        config = load_config()

    scheduler = BlockingScheduler(timezone=config.timezone)

    if not config.payment_reminders_enabled:
        logger.warning("Payment reminders disabled in config - no job scheduled")
        return scheduler

    try:
        hour, minute = parse_reminder_time(config.reminder_time)
    except ValueError:
        logger.warning(f"Invalid reminder time format: {config.reminder_time}, using 09:00")
        hour, minute = 9, 0

    scheduler.add_job(
        run_scheduled_reminders,
        CronTrigger(hour=hour, minute=minute),
        args=[config],
        id="payment_reminders",
        # A single run at a time; overlapping triggers are dropped
        max_instances=1,
        coalesce=True,
    )
    logger.info(f"Scheduled payment reminders at {hour:02d}:{minute:02d} {config.timezone}")
    return scheduler


def run_scheduler(config: Config | None = None) -> None:
    """Run the scheduler in the foreground until interrupted."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.INFO,
    )
    scheduler = setup_scheduler(config)
    scheduler.start()
