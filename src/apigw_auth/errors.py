"""Error taxonomy for the annotation pass."""

from __future__ import annotations

from typing import Optional


class ApiGatewayAuthError(RuntimeError):
    """Base class for every error raised by apigw_auth."""


class MalformedEventSpecError(ApiGatewayAuthError):
    """Raised when an ``http`` event cannot be read as a method/path pair."""

    def __init__(
        self,
        message: str,
        *,
        function_name: Optional[str] = None,
        event_index: Optional[int] = None,
    ) -> None:
        self.function_name = function_name
        self.event_index = event_index
        where = ""
        if function_name:
            where = f"function '{function_name}'"
            if event_index is not None:
                where += f", event #{event_index}"
            where += ": "
        super().__init__(f"{where}{message}")


class ResourceNotFoundError(ApiGatewayAuthError):
    """Raised when a synthesized logical id has no method resource in the template."""

    def __init__(
        self, logical_id: str, *, method: str = "", path: str = "", reason: str = ""
    ) -> None:
        self.logical_id = logical_id
        self.method = method
        self.path = path
        self.reason = reason or "was not found in the compiled template"
        super().__init__(f"Resource '{logical_id}' for {method.upper()} {path} {self.reason}")


class DocumentLoadError(ApiGatewayAuthError):
    """Raised when a service or template document cannot be loaded."""


class ServiceConfigError(ApiGatewayAuthError):
    """Raised when the host's function declarations are inconsistent."""
