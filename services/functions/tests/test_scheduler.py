import json
import time
from datetime import datetime, timezone

import httpx
import pytest

from services.functions.core.schedule import next_run
from services.functions.models import FunctionConfig, ProjectConfig, ServerSettings
from services.functions.services.registry import FunctionRegistry
from services.functions.services.scheduler import (
    CronTrigger,
    SchedulerService,
    build_scheduled_request,
)


@pytest.fixture
def registry():
    return FunctionRegistry()


@pytest.fixture
def scheduler_service(registry):
    return SchedulerService(registry, misfire_grace_time=30)


def _scheduled_function(make_function, runtime, name="cron", schedule="*/5 * * * *"):
    return make_function(
        runtime,
        name=name,
        config=ProjectConfig(functions={name: FunctionConfig(schedule=schedule)}),
        settings=ServerSettings(port=8888),
    )


def test_cron_trigger_next_fire_time():
    trigger = CronTrigger("*/5 * * * *")
    now = datetime(2024, 1, 1, 12, 2, tzinfo=timezone.utc)

    assert trigger.get_next_fire_time(None, now) == datetime(
        2024, 1, 1, 12, 5, tzinfo=timezone.utc
    )
    assert str(trigger) == "cron(*/5 * * * *)"


def test_cron_trigger_rejects_invalid_expression():
    with pytest.raises(ValueError):
        CronTrigger("every five minutes")


def test_build_scheduled_request(make_runtime, make_function):
    func = _scheduled_function(make_function, make_runtime())
    now = datetime(2024, 1, 1, 12, 2, tzinfo=timezone.utc)

    request = build_scheduled_request(func, now)

    assert request.method == "POST"
    assert str(request.url) == "http://localhost:8888/.netlify/functions/cron"
    assert request.headers["user-agent"] == "Netlify Clockwork"
    assert request.headers["x-nf-event"] == "schedule"
    assert json.loads(request.content) == {"next_run": "2024-01-01T12:05:00+00:00"}


@pytest.mark.asyncio
async def test_load_schedules(scheduler_service, registry, make_runtime, make_function):
    registry.register(_scheduled_function(make_function, make_runtime(), name="cron"))
    registry.register(make_function(make_runtime(), name="plain"))
    registry.register(
        _scheduled_function(make_function, make_runtime(), name="broken", schedule="nope")
    )

    await scheduler_service.load_schedules()

    job_ids = [job.id for job in scheduler_service.scheduler.get_jobs()]
    assert job_ids == ["cron_schedule"]


@pytest.mark.asyncio
async def test_job_execution_invokes_function(
    scheduler_service, registry, make_runtime, make_function
):
    runtime = make_runtime()
    registry.register(_scheduled_function(make_function, runtime))
    await scheduler_service.load_schedules()

    job = scheduler_service.scheduler.get_job("cron_schedule")
    await job.func()

    request = runtime.invoke_function.await_args.kwargs["request"]
    assert request.headers["x-nf-event"] == "schedule"
    assert "next_run" in json.loads(request.content)


@pytest.mark.asyncio
async def test_trigger_skips_failed_build(scheduler_service, make_runtime, make_function):
    runtime = make_runtime([RuntimeError("broken")])
    func = _scheduled_function(make_function, runtime)
    await func.build("/tmp/build")

    assert await scheduler_service.trigger(func) is None
    runtime.invoke_function.assert_not_awaited()


@pytest.mark.asyncio
async def test_trigger_returns_error_response(scheduler_service, make_runtime, make_function):
    runtime = make_runtime(response=httpx.Response(502, text="bad gateway"))
    func = _scheduled_function(make_function, runtime)

    response = await scheduler_service.trigger(func)

    assert response.status_code == 502


@pytest.mark.asyncio
async def test_trigger_without_server_port_returns_none(
    scheduler_service, make_runtime, make_function
):
    runtime = make_runtime()
    func = make_function(
        runtime,
        name="cron",
        config=ProjectConfig(functions={"cron": FunctionConfig(schedule="*/5 * * * *")}),
    )

    assert await scheduler_service.trigger(func) is None
    runtime.invoke_function.assert_not_awaited()


def test_next_run_treats_naive_now_as_utc(monkeypatch):
    monkeypatch.setenv("TZ", "America/New_York")
    if hasattr(time, "tzset"):
        time.tzset()
    try:
        assert next_run("0 12 * * *", datetime(2024, 1, 1, 11, 0)) == datetime(
            2024, 1, 1, 12, 0, tzinfo=timezone.utc
        )
    finally:
        monkeypatch.undo()
        if hasattr(time, "tzset"):
            time.tzset()
