"""
Execution environment and storage context models.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict

from ..config import FunctionsConfig


class ExecutionEnvironment(BaseModel):
    """
    Describes the environment functions are executed in.

    Injected into each function instead of being read from process state,
    so that support checks can be evaluated against any version.
    """

    model_config = ConfigDict(frozen=True)

    version: str
    v2_min_version: str = "18.14.0"

    @classmethod
    def from_config(cls, cfg: FunctionsConfig) -> "ExecutionEnvironment":
        return cls(version=cfg.RUNTIME_VERSION, v2_min_version=cfg.V2_MIN_RUNTIME_VERSION)


class StorageContext(BaseModel):
    """Credentials and locators for the emulated blob store."""

    model_config = ConfigDict(frozen=True)

    primary_region: Optional[str] = None
    edge_url: str
    token: str
