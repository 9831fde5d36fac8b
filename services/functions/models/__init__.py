"""
Data model definitions package.

Aggregates Pydantic models and result types for use in other modules.
"""

from .build import (
    BuildFailure,
    BuildOutcome,
    BuildResult,
    BuildSnapshot,
    BuildSuccess,
    SrcFilesDiff,
)
from .environment import ExecutionEnvironment, StorageContext
from .error import InvocationError
from .route import ExtendedRoute, RouteSpec
from .settings import FunctionConfig, ProjectConfig, ServerSettings

__all__ = [
    "BuildFailure",
    "BuildOutcome",
    "BuildResult",
    "BuildSnapshot",
    "BuildSuccess",
    "SrcFilesDiff",
    "ExecutionEnvironment",
    "StorageContext",
    "InvocationError",
    "ExtendedRoute",
    "RouteSpec",
    "FunctionConfig",
    "ProjectConfig",
    "ServerSettings",
]
