"""
Build domain models.

BuildResult is what the runtime hands back after compiling a function.
BuildSnapshot is the committed view a function serves from; it is never
mutated, only replaced.
"""

from dataclasses import dataclass, field, replace
from typing import FrozenSet, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from .route import ExtendedRoute


class BuildResult(BaseModel):
    """Metadata produced by the runtime for one build."""

    model_config = ConfigDict(frozen=True)

    main_file: str
    runtime_api_version: int = 1
    output_module_format: Optional[str] = None
    included_files: List[str] = Field(default_factory=list)
    routes: Optional[List[ExtendedRoute]] = None
    schedule: Optional[str] = None
    src_files: List[str] = Field(default_factory=list)


@dataclass(frozen=True)
class BuildSnapshot:
    data: Optional[BuildResult] = None
    src_files: FrozenSet[str] = frozenset()
    routes: Optional[Tuple[ExtendedRoute, ...]] = None

    def with_routes(self, routes: Optional[List[ExtendedRoute]]) -> "BuildSnapshot":
        """Copy of this snapshot whose build data and routes both carry ``routes``."""
        data = self.data
        if data is not None:
            data = data.model_copy(update={"routes": routes})
        return replace(
            self, data=data, routes=tuple(routes) if routes is not None else None
        )


@dataclass(frozen=True)
class SrcFilesDiff:
    added: FrozenSet[str] = frozenset()
    deleted: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class BuildSuccess:
    included_files: List[str] = field(default_factory=list)
    src_files_diff: SrcFilesDiff = field(default_factory=SrcFilesDiff)


@dataclass(frozen=True)
class BuildFailure:
    error: BaseException


BuildOutcome = Union[BuildSuccess, BuildFailure]
