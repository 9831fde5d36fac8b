import asyncio
import os
from typing import Any, List, Optional
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

# Config is initialized at import time, so set the environment at top level.
os.environ.setdefault("RUNTIME_VERSION", "v20.6.1")

from services.functions.models import BuildResult, ExecutionEnvironment  # noqa: E402
from services.functions.services.function import LocalFunction  # noqa: E402


def _make_runtime(
    results: Optional[List[Any]] = None,
    build_delay: float = 0.0,
    response: Optional[httpx.Response] = None,
) -> MagicMock:
    """
    Runtime mock.

    ``results`` are returned (or raised, for exceptions) by successive
    build function calls.
    """
    pending = list(results or [])

    async def build_function(cache):
        if build_delay:
            await asyncio.sleep(build_delay)
        result = pending.pop(0) if pending else None
        if isinstance(result, BaseException):
            raise result
        return result

    runtime = MagicMock()
    runtime.name = "js"
    runtime.build_function = AsyncMock(side_effect=build_function)
    runtime.get_build_function = AsyncMock(return_value=runtime.build_function)
    runtime.invoke_function = AsyncMock(
        return_value=response if response is not None else httpx.Response(200, text="ok")
    )
    return runtime


def _make_build_result(**overrides) -> BuildResult:
    data = {
        "main_file": "/project/netlify/functions/hello/hello.mjs",
        "runtime_api_version": 2,
        "output_module_format": "esm",
        "src_files": ["/project/netlify/functions/hello/hello.mjs"],
    }
    data.update(overrides)
    return BuildResult(**data)


def _make_function(runtime, name: str = "hello", **kwargs) -> LocalFunction:
    kwargs.setdefault("environment", ExecutionEnvironment(version="v20.6.1"))
    kwargs.setdefault("timeout_synchronous", 30)
    kwargs.setdefault("timeout_background", 900)
    return LocalFunction(
        name=name,
        main_file=f"/project/netlify/functions/{name}/{name}.mjs",
        directory="/project/netlify/functions",
        project_root="/project",
        runtime=runtime,
        **kwargs,
    )


@pytest.fixture
def request_factory():
    def _make(
        method: str = "GET",
        path: str = "/.netlify/functions/hello",
        accept: Optional[str] = None,
    ) -> httpx.Request:
        headers = {"accept": accept} if accept else {}
        return httpx.Request(method, f"http://localhost:8888{path}", headers=headers)

    return _make


@pytest.fixture
def make_runtime():
    return _make_runtime


@pytest.fixture
def make_build_result():
    return _make_build_result


@pytest.fixture
def make_function():
    return _make_function
