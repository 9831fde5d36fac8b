"""
Explicit configuration structs read by a function descriptor.
"""

from typing import Dict, Optional

from pydantic import BaseModel, Field


class FunctionConfig(BaseModel):
    """Per-function entry of the project configuration."""

    schedule: Optional[str] = None


class ProjectConfig(BaseModel):
    functions: Dict[str, FunctionConfig] = Field(default_factory=dict)

    def function_config(self, name: str) -> Optional[FunctionConfig]:
        return self.functions.get(name)


class ServerSettings(BaseModel):
    """Local server settings used to build function URLs."""

    port: Optional[int] = None
    functions_port: Optional[int] = None
    https: bool = False

    @property
    def protocol(self) -> str:
        return "https" if self.https else "http"
