"""
Functions service configuration definition.

Loads configuration from environment variables and provides a Pydantic model.
Uses pydantic-settings for type safety and defaults.
"""

import sys
from pydantic import Field
from services.common.core.config import BaseAppConfig


class FunctionsConfig(BaseAppConfig):
    """
    Configuration management for the local functions service.
    """

    # Invocation timeouts (seconds), enforced by the runtime
    FUNCTIONS_TIMEOUT_SYNCHRONOUS: int = Field(
        default=30, description="Timeout for synchronous functions"
    )
    FUNCTIONS_TIMEOUT_BACKGROUND: int = Field(
        default=900, description="Timeout for background functions"
    )

    # Execution environment
    RUNTIME_VERSION: str = Field(
        default="v20.6.1", description="Version of the runtime that executes functions"
    )
    V2_MIN_RUNTIME_VERSION: str = Field(
        default="18.14.0", description="Minimum runtime version for API version 2 functions"
    )

    # Scheduled functions
    SCHEDULE_MISFIRE_GRACE_TIME: int = Field(
        default=60, description="Seconds a late scheduled run is still allowed to fire"
    )

    # model_config is inherited


# Load config as a singleton.
# pydantic-settings reads environment variables during instantiation.
try:
    config = FunctionsConfig()
except Exception as e:
    sys.stderr.write(f"Failed to load configuration: {e}\n")
    raise
