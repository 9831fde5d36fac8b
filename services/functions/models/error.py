from typing import List

from pydantic import BaseModel, ConfigDict, Field


class InvocationError(BaseModel):
    """
    Canonical error shape for a failed invocation.

    Attribute names are snake_case; the camelCase names used on the wire
    are accepted as aliases and emitted by ``model_dump(by_alias=True)``.
    """

    model_config = ConfigDict(populate_by_name=True)

    error_type: str = Field(alias="errorType")
    error_message: str = Field(alias="errorMessage")
    stack_trace: List[str] = Field(default_factory=list, alias="stackTrace")
