"""
Local function registry.

Keeps the project's function descriptors by name and dispatches requests
to the function whose routes match.
"""

import asyncio
import logging
from typing import Dict, List, Optional, Tuple

from ..models.build import BuildOutcome
from ..models.route import ExtendedRoute
from .function import LocalFunction
from .runtime import BuildCache

logger = logging.getLogger("functions.registry")


class FunctionRegistry:
    def __init__(self):
        self._functions: Dict[str, LocalFunction] = {}

    def __len__(self) -> int:
        return len(self._functions)

    def __contains__(self, name: object) -> bool:
        return name in self._functions

    def register(self, func: LocalFunction) -> None:
        """
        Add or replace a function.

        Invalid names are kept and only reported; callers decide whether
        to refuse them.
        """
        if not func.has_valid_name():
            logger.warning(
                f"Function name '{func.name}' is invalid. It should consist only of "
                "alphanumeric characters, hyphen & underscores."
            )
        if func.name in self._functions:
            logger.info(f"Reloaded function {func.name}")
        else:
            logger.info(f"Loaded function {func.name}")
        self._functions[func.name] = func

    def get(self, name: str) -> Optional[LocalFunction]:
        return self._functions.get(name)

    def remove(self, name: str) -> Optional[LocalFunction]:
        func = self._functions.pop(name, None)
        if func is not None:
            logger.info(f"Removed function {name}")
        return func

    def functions(self) -> List[LocalFunction]:
        return list(self._functions.values())

    async def build_all(
        self, target_directory: str, cache: Optional[BuildCache] = None
    ) -> Dict[str, BuildOutcome]:
        """Build every function concurrently; one outcome per function name."""
        if cache is None:
            cache = {}
        funcs = self.functions()
        outcomes = await asyncio.gather(
            *(func.build(target_directory, cache) for func in funcs)
        )
        return {func.name: outcome for func, outcome in zip(funcs, outcomes)}

    def match(self, path: str, method: str) -> Optional[Tuple[LocalFunction, ExtendedRoute]]:
        """
        Find the first function with a route matching the request.

        Returns:
            (function, matched route), or None
        """
        for func in self._functions.values():
            route = func.match_url_path(path, method)
            if route is not None:
                return func, route
        return None

    async def scheduled_functions(self) -> List[LocalFunction]:
        scheduled = []
        for func in self.functions():
            if await func.is_scheduled():
                scheduled.append(func)
        return scheduled
