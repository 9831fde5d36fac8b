import json
import logging
from datetime import datetime, timezone
from typing import Optional

import httpx
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.base import BaseTrigger

from ..config import config
from ..core.schedule import next_run, validate_schedule
from ..models.build import BuildFailure
from .function import LocalFunction
from .registry import FunctionRegistry

logger = logging.getLogger("functions.scheduler")

CLOCKWORK_USERAGENT = "Netlify Clockwork"
SCHEDULE_EVENT_HEADER = "X-NF-Event"


class CronTrigger(BaseTrigger):
    """APScheduler trigger evaluating a cron expression in UTC with croniter."""

    def __init__(self, expression: str):
        validate_schedule(expression)
        self.expression = expression

    def get_next_fire_time(self, previous_fire_time, now):
        return next_run(self.expression, now)

    def __str__(self):
        return f"cron({self.expression})"


def build_scheduled_request(func: LocalFunction, now: Optional[datetime] = None) -> httpx.Request:
    """Synthetic request sent to a scheduled function when its schedule fires."""
    body = {}
    if func.schedule:
        body["next_run"] = next_run(func.schedule, now).isoformat()

    return httpx.Request(
        "POST",
        func.url,
        content=json.dumps(body).encode("utf-8"),
        headers={
            "Content-Type": "application/json",
            "User-Agent": CLOCKWORK_USERAGENT,
            SCHEDULE_EVENT_HEADER: "schedule",
        },
    )


class SchedulerService:
    def __init__(self, registry: FunctionRegistry, misfire_grace_time: Optional[int] = None):
        self.registry = registry
        self.misfire_grace_time = (
            misfire_grace_time
            if misfire_grace_time is not None
            else config.SCHEDULE_MISFIRE_GRACE_TIME
        )
        self.scheduler = AsyncIOScheduler(timezone=timezone.utc)

    async def start(self):
        """Start the scheduler."""
        if not self.scheduler.running:
            self.scheduler.start()
            logger.info("Scheduler service started.")

    async def stop(self):
        """Stop the scheduler."""
        if self.scheduler.running:
            self.scheduler.shutdown()
            logger.info("Scheduler service stopped.")

    async def load_schedules(self):
        """(Re)load one job per scheduled function in the registry."""
        self.scheduler.remove_all_jobs()

        for func in await self.registry.scheduled_functions():
            try:
                self._add_schedule_job(func)
            except ValueError as e:
                logger.error(f"Failed to add schedule for {func.name} ({func.schedule}): {e}")

    def _add_schedule_job(self, func: LocalFunction):
        trigger = CronTrigger(func.schedule)
        job_id = f"{func.name}_schedule"

        async def job_func():
            await self.trigger(func)

        self.scheduler.add_job(
            job_func,
            trigger=trigger,
            id=job_id,
            replace_existing=True,
            misfire_grace_time=self.misfire_grace_time,
        )
        logger.info(f"Added schedule job {job_id} for {func.name}: {func.schedule}")

    async def trigger(self, func: LocalFunction) -> Optional[httpx.Response]:
        """Run a scheduled function once, the way its schedule would."""
        logger.info(f"Triggering scheduled invocation for {func.name}")
        try:
            request = build_scheduled_request(func)
            result = await func.invoke(request)
        except Exception as e:
            logger.error(f"Scheduled invocation failed for {func.name}: {e}")
            return None

        if isinstance(result, BuildFailure):
            logger.error(
                f"Scheduled invocation skipped for {func.name}: build failed: {result.error}"
            )
            return None

        if result.status_code >= 400:
            logger.warning(
                f"Scheduled invocation of {func.name} returned {result.status_code}"
            )
        return result
