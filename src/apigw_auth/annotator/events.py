from __future__ import annotations

import logging
from typing import Any, Iterable, Iterator, Mapping, Optional

from pydantic import ValidationError

from apigw_auth.domain.models import AuthFlags, EndpointDeclaration, FunctionDeclaration, HttpTrigger
from apigw_auth.errors import MalformedEventSpecError

logger = logging.getLogger("apigw_auth.events")


def host_field(obj: Any, name: str) -> Any:
    # host objects may be plain dicts or attribute bags
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def _split_shorthand(value: str) -> tuple[str, str]:
    # "GET /items/{id}" -> ("GET", "/items/{id}")
    method, _, path = value.strip().partition(" ")
    return method.strip(), path.strip()


def parse_http_event(
    event: Any,
    *,
    function_name: str = "",
    event_index: int = 0,
) -> Optional[EndpointDeclaration]:
    """
    Read one raw host event into an EndpointDeclaration.

    Returns None for events without an ``http`` key. Both the structured
    form ``{"http": {"method": ..., "path": ...}}`` and the shorthand
    ``{"http": "GET /path"}`` are accepted. Auth flags may sit inside the
    structured form or next to ``http`` on the event; either one being true
    turns the flag on.
    """
    if not isinstance(event, Mapping) or event.get("http") is None:
        return None

    http = event["http"]

    def malformed(message: str) -> MalformedEventSpecError:
        return MalformedEventSpecError(
            message, function_name=function_name, event_index=event_index
        )

    try:
        flags = AuthFlags.model_validate(dict(event))
    except ValidationError as exc:
        raise malformed(f"invalid auth flag ({exc.error_count()} error(s))") from exc

    if isinstance(http, str):
        method, path = _split_shorthand(http)
        if not method or not path:
            raise malformed(f"http shorthand {http!r} is not of the form 'METHOD /path'")
    elif isinstance(http, Mapping):
        try:
            trigger = HttpTrigger.model_validate(dict(http))
        except ValidationError as exc:
            raise malformed(
                f"http event is missing a usable path/method ({exc.error_count()} error(s))"
            ) from exc
        method, path = trigger.method, trigger.path
        flags = AuthFlags(
            use_iam_auth=flags.use_iam_auth or trigger.use_iam_auth,
            invoke_with_caller_credentials=(
                flags.invoke_with_caller_credentials or trigger.invoke_with_caller_credentials
            ),
        )
    else:
        raise malformed(f"http event must be a mapping or a string, got {type(http).__name__}")

    return EndpointDeclaration(
        path=path,
        method=method,
        use_iam_auth=flags.use_iam_auth,
        invoke_with_caller_credentials=flags.invoke_with_caller_credentials,
        function_name=function_name,
        event_index=event_index,
    )


def iter_endpoints(functions: Iterable[FunctionDeclaration]) -> Iterator[EndpointDeclaration]:
    """Every HTTP endpoint, functions and events in declaration order."""
    for fn in functions:
        for idx, event in enumerate(fn.events):
            endpoint = parse_http_event(event, function_name=fn.name, event_index=idx)
            if endpoint is None:
                logger.debug("%s event #%d: no http trigger, skipped", fn.name, idx)
                continue
            yield endpoint


def functions_from_mapping(functions: Mapping[str, Any]) -> list[FunctionDeclaration]:
    """Host ``functions`` mapping -> FunctionDeclaration list (mapping order kept)."""
    out: list[FunctionDeclaration] = []
    for name, body in functions.items():
        events = host_field(body, "events") or []
        out.append(FunctionDeclaration(name=name, events=list(events)))
    return out
