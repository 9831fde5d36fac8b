"""
Route domain models.

A route is either a literal path or a regular expression, optionally
restricted to a set of HTTP methods.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class RouteSpec(BaseModel):
    """Literal or expression based path matcher."""

    model_config = ConfigDict(frozen=True)

    literal: Optional[str] = None
    expression: Optional[str] = None
    # Empty means every method is accepted.
    methods: List[str] = Field(default_factory=list)

    def accepts_method(self, method: str) -> bool:
        return not self.methods or method in self.methods


class ExtendedRoute(RouteSpec):
    """Route declared by a function build, keeping its user-facing pattern."""

    pattern: Optional[str] = None
    prefer_static: bool = False
