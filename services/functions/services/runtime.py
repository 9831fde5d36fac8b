"""
Runtime protocol.

A runtime compiles a function's sources into an invocable module and
executes it. Implementations live outside this package.
"""

from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, MutableMapping, Optional, Protocol

import httpx

from ..models.build import BuildResult
from ..models.settings import ProjectConfig

if TYPE_CHECKING:
    from .function import LocalFunction

# Build fingerprint -> previously computed result. Opaque to the orchestrator.
BuildCache = MutableMapping[str, Any]
BuildFunction = Callable[[BuildCache], Awaitable[Optional[BuildResult]]]


class Runtime(Protocol):
    name: str

    async def get_build_function(
        self,
        *,
        func: "LocalFunction",
        config: ProjectConfig,
        directory: str,
        project_root: str,
        target_directory: str,
    ) -> BuildFunction: ...

    async def invoke_function(
        self,
        *,
        context: Dict[str, Any],
        environment: Dict[str, str],
        func: "LocalFunction",
        request: httpx.Request,
        route: Optional[str],
        timeout: int,
    ) -> httpx.Response:
        """
        Execute the built function.

        May raise any exception; failures that happened on the other side of
        the process boundary are raised as RuntimeInvocationFailure.
        """
        ...
