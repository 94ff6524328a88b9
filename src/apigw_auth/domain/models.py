from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AuthFlags(BaseModel):
    """The two auth switches, wherever the host puts them on an event."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    use_iam_auth: bool = Field(default=False, alias="useIAMAuth")
    invoke_with_caller_credentials: bool = Field(
        default=False, alias="invokeWithCallerCredentials"
    )


class HttpTrigger(AuthFlags):
    """Structured form of an ``http`` event as the host declares it."""

    model_config = ConfigDict(extra="allow")

    path: str
    method: str

    @field_validator("path", "method")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v.strip()


class EndpointDeclaration(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    path: str
    method: str
    use_iam_auth: bool = Field(default=False, alias="useIAMAuth")
    invoke_with_caller_credentials: bool = Field(
        default=False, alias="invokeWithCallerCredentials"
    )

    function_name: str = ""
    event_index: int = 0

    @property
    def flagged(self) -> bool:
        return self.use_iam_auth or self.invoke_with_caller_credentials


class FunctionDeclaration(BaseModel):
    name: str
    events: list[Any] = Field(default_factory=list)
