"""
Services package.

Provides the function descriptor, its registry and the schedule runner.
"""

from .function import LocalFunction
from .registry import FunctionRegistry
from .runtime import BuildCache, BuildFunction, Runtime
from .scheduler import SchedulerService

__all__ = [
    "LocalFunction",
    "FunctionRegistry",
    "BuildCache",
    "BuildFunction",
    "Runtime",
    "SchedulerService",
]
