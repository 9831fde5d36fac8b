"""
Local function descriptor.

Owns the build/invoke lifecycle of one function:

- build: turns the function's sources into an invocable module through the
  runtime, joining the in-flight build instead of starting a second one.
- invoke: waits for the current build (or runs a dedicated one), then
  executes the function and converts failures into 500 responses.
- route matching and schedule/support accessors over the committed build.

Build state lives in a single immutable BuildSnapshot that is replaced in
one assignment, so readers never see fields from two different builds.
"""

import asyncio
import logging
import os
import re
import time
from datetime import datetime
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Sequence, Union

import httpx

from services.common.core.request_context import function_context

from ..config import config as functions_config
from ..core.error_page import ErrorPageRenderer, JinjaErrorPageRenderer
from ..core.errors import accepts_html, handle_error
from ..core.exceptions import FunctionBuildError, FunctionError, UnsupportedRuntimeError
from ..core.routes import match_url_path
from ..core.schedule import next_run
from ..core.storage import attach_storage_context
from ..core.versions import V2_API_VERSION, is_runtime_supported
from ..models.build import (
    BuildFailure,
    BuildOutcome,
    BuildResult,
    BuildSnapshot,
    BuildSuccess,
    SrcFilesDiff,
)
from ..models.environment import ExecutionEnvironment, StorageContext
from ..models.route import ExtendedRoute, RouteSpec
from ..models.settings import ProjectConfig, ServerSettings
from .runtime import BuildCache, Runtime

logger = logging.getLogger("functions.function")

BACKGROUND_FUNCTION_SUFFIX = "-background"
TYPESCRIPT_EXTENSIONS = frozenset({".cts", ".mts", ".ts"})
# Same rule the deploy API applies to function names.
VALID_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


class LocalFunction:
    def __init__(
        self,
        *,
        name: str,
        main_file: str,
        directory: str,
        project_root: str,
        runtime: Runtime,
        environment: Optional[ExecutionEnvironment] = None,
        config: Optional[ProjectConfig] = None,
        settings: Optional[ServerSettings] = None,
        display_name: Optional[str] = None,
        routes: Optional[Sequence[ExtendedRoute]] = None,
        excluded_routes: Optional[Sequence[RouteSpec]] = None,
        storage_context: Optional[StorageContext] = None,
        timeout_synchronous: Optional[int] = None,
        timeout_background: Optional[int] = None,
        error_renderer: Optional[ErrorPageRenderer] = None,
    ):
        """
        Args:
            name: function name, also the last segment of its URL
            main_file: path of the entry file
            directory: functions directory the source lives in
            project_root: root of the project
            runtime: Runtime that builds and executes the function
            environment: execution environment (defaults to the configured one)
            config: project config; its per-function schedule is the initial schedule
            settings: local server settings used by ``url``
            storage_context: blob store context forwarded on every invocation
        """
        self.name = name
        self.main_file = main_file
        self.directory = directory
        self.project_root = project_root
        self.runtime = runtime
        self.display_name = display_name or name
        self.environment = environment or ExecutionEnvironment.from_config(functions_config)
        self.config = config or ProjectConfig()
        self.settings = settings or ServerSettings()
        self.storage_context = storage_context
        self.error_renderer = error_renderer or JinjaErrorPageRenderer()

        if timeout_synchronous is None:
            timeout_synchronous = functions_config.FUNCTIONS_TIMEOUT_SYNCHRONOUS
        if timeout_background is None:
            timeout_background = functions_config.FUNCTIONS_TIMEOUT_BACKGROUND
        self.timeout_synchronous = timeout_synchronous
        self.timeout_background = timeout_background

        self.is_background = name.endswith(BACKGROUND_FUNCTION_SUFFIX)

        function_config = self.config.function_config(name)
        self.schedule: Optional[str] = function_config.schedule if function_config else None

        self.excluded_routes: List[RouteSpec] = list(excluded_routes or [])
        self.build_error: Optional[BaseException] = None

        self._snapshot = BuildSnapshot(routes=tuple(routes) if routes is not None else None)
        self._build_task: Optional["asyncio.Task[BuildOutcome]"] = None

    def __repr__(self) -> str:
        return f"LocalFunction(name={self.name!r}, main_file={self.main_file!r})"

    # ------------------------------------------------------------------
    # Committed build views
    # ------------------------------------------------------------------

    @property
    def build_data(self) -> Optional[BuildResult]:
        return self._snapshot.data

    @property
    def src_files(self) -> FrozenSet[str]:
        return self._snapshot.src_files

    @property
    def routes(self) -> Optional[List[ExtendedRoute]]:
        routes = self._snapshot.routes
        return list(routes) if routes is not None else None

    @property
    def filename(self) -> Optional[str]:
        if self.build_data is None or not self.build_data.main_file:
            return None
        return os.path.basename(self.build_data.main_file)

    @property
    def runtime_api_version(self) -> int:
        if self.build_data is None:
            return 1
        return self.build_data.runtime_api_version

    @property
    def url(self) -> str:
        port = self.settings.port or self.settings.functions_port
        if port is None:
            raise FunctionError(f"No server port configured to build the URL of {self.name}")
        return f"{self.settings.protocol}://localhost:{port}/.netlify/functions/{self.name}"

    def has_valid_name(self) -> bool:
        return VALID_NAME_PATTERN.match(self.name) is not None

    def is_supported(self) -> bool:
        return is_runtime_supported(self.runtime_api_version, self.environment)

    def is_typescript(self) -> bool:
        if self.filename is None:
            return False
        return os.path.splitext(self.filename)[1] in TYPESCRIPT_EXTENSIONS

    def get_recommended_extension(self) -> Optional[str]:
        """Suggest an extension that makes a v2 function load as an ES module."""
        data = self.build_data
        if data is None or data.runtime_api_version != V2_API_VERSION:
            return None
        if data.output_module_format == "esm":
            return None

        extension = os.path.splitext(data.main_file)[1] if data.main_file else None
        if extension == ".ts":
            return ".mts"
        if extension == ".js":
            return ".mjs"
        return None

    def get_src_files_diff(self, new_src_files: Iterable[str]) -> SrcFilesDiff:
        """Compare a set of source files against the committed one."""
        new_set = frozenset(new_src_files)
        current = self._snapshot.src_files
        return SrcFilesDiff(added=new_set - current, deleted=current - new_set)

    def set_routes(self, routes: Optional[Sequence[ExtendedRoute]]) -> None:
        """Override the routes of the committed build."""
        if self._snapshot.data is None:
            logger.debug(f"Ignoring route update for unbuilt function {self.name}")
            return
        self._snapshot = self._snapshot.with_routes(list(routes) if routes is not None else None)

    def match_url_path(self, raw_path: str, method: str) -> Optional[ExtendedRoute]:
        return match_url_path(raw_path, method, self._snapshot.routes, self.excluded_routes)

    # ------------------------------------------------------------------
    # Build queue
    # ------------------------------------------------------------------

    async def _wait_for_build(self) -> None:
        task = self._build_task
        while task is not None and not task.done():
            # A cancelled waiter must not cancel the shared build.
            await asyncio.shield(task)
            task = self._build_task

    async def get_build_data(self) -> Optional[BuildResult]:
        await self._wait_for_build()
        return self.build_data

    async def is_scheduled(self) -> bool:
        await self._wait_for_build()
        return bool(self.schedule)

    async def get_next_run(self, now: Optional[datetime] = None) -> Optional[datetime]:
        if not await self.is_scheduled():
            return None
        return next_run(self.schedule, now)

    async def build(
        self, target_directory: str, cache: Optional[BuildCache] = None
    ) -> BuildOutcome:
        """
        Build the function, or join the build that is already running.

        Returns:
            BuildSuccess with the included files and the source files diff,
            or BuildFailure carrying the error (also stored in build_error).
        """
        task = self._build_task
        if task is not None and not task.done():
            logger.debug(f"Joining in-flight build of {self.name}")
            return await asyncio.shield(task)
        return await self._start_build(target_directory, cache)

    async def _rebuild(self, target_directory: str, cache: Optional[BuildCache]) -> BuildOutcome:
        await self._wait_for_build()
        return await self._start_build(target_directory, cache)

    async def _start_build(
        self, target_directory: str, cache: Optional[BuildCache]
    ) -> BuildOutcome:
        task = asyncio.create_task(
            self._run_build(target_directory, cache if cache is not None else {})
        )
        self._build_task = task
        return await asyncio.shield(task)

    async def _run_build(self, target_directory: str, cache: BuildCache) -> BuildOutcome:
        started = time.monotonic()
        with function_context(self.name):
            try:
                build_function = await self.runtime.get_build_function(
                    func=self,
                    config=self.config,
                    directory=self.directory,
                    project_root=self.project_root,
                    target_directory=target_directory,
                )
                build_data = await build_function(cache)
                if build_data is None:
                    raise FunctionBuildError(self.name)

                outcome = self._commit(build_data)

                if not self.is_supported():
                    raise UnsupportedRuntimeError(
                        self.name, self.environment.v2_min_version, self.environment.version
                    )
            except Exception as e:
                self.build_error = e
                logger.warning(
                    f"Failed to build function {self.name}: {e}",
                    extra={
                        "target_directory": target_directory,
                        "error_type": type(e).__name__,
                    },
                )
                return BuildFailure(e)

            logger.info(
                f"Built function {self.name}",
                extra={
                    "duration_ms": round((time.monotonic() - started) * 1000, 1),
                    "added_files": len(outcome.src_files_diff.added),
                    "deleted_files": len(outcome.src_files_diff.deleted),
                },
            )
            return outcome

    def _commit(self, build_data: BuildResult) -> BuildSuccess:
        src_files = frozenset(build_data.src_files)
        src_files_diff = self.get_src_files_diff(src_files)
        routes = tuple(build_data.routes) if build_data.routes is not None else None

        self._snapshot = BuildSnapshot(data=build_data, src_files=src_files, routes=routes)
        self.build_error = None
        self.schedule = build_data.schedule or self.schedule

        return BuildSuccess(
            included_files=list(build_data.included_files), src_files_diff=src_files_diff
        )

    # ------------------------------------------------------------------
    # Invocation
    # ------------------------------------------------------------------

    async def invoke(
        self,
        request: httpx.Request,
        build_cache: Optional[BuildCache] = None,
        build_directory: Optional[str] = None,
        client_context: Optional[Dict[str, Any]] = None,
        route: Optional[str] = None,
    ) -> Union[httpx.Response, BuildFailure]:
        """
        Invoke the function and return its response.

        When ``build_directory`` is given, a build dedicated to this
        invocation runs first; otherwise the current build is awaited.
        A failed build is returned as BuildFailure without invoking.
        Errors raised while executing become 500 responses.
        """
        if build_directory:
            await self._rebuild(build_directory, build_cache)
        else:
            await self._wait_for_build()

        if self.build_error is not None:
            return BuildFailure(self.build_error)

        timeout = self.timeout_background if self.is_background else self.timeout_synchronous
        environment: Dict[str, str] = {}

        if self.storage_context is not None:
            attach_storage_context(request, self.storage_context)

        with function_context(self.name, invocation=True) as invocation_id:
            logger.info(
                f"Invoking {self.name}",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "route": route,
                    "timeout": timeout,
                },
            )
            try:
                return await self.runtime.invoke_function(
                    context=client_context or {},
                    environment=environment,
                    func=self,
                    request=request,
                    route=route,
                    timeout=timeout,
                )
            except Exception as e:
                logger.error(
                    f"Function invocation failed for '{self.name}'",
                    extra={
                        "invocation_id": invocation_id,
                        "error_type": type(e).__name__,
                        "error_detail": str(e),
                    },
                )
                return await handle_error(e, accepts_html(request), self.error_renderer)
