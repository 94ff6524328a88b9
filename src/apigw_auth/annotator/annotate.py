from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, MutableMapping, Optional

from apigw_auth.annotator.events import iter_endpoints
from apigw_auth.config import Settings, get_settings
from apigw_auth.domain.models import EndpointDeclaration, FunctionDeclaration
from apigw_auth.errors import ResourceNotFoundError
from apigw_auth.naming.logical_ids import method_logical_id

logger = logging.getLogger("apigw_auth.annotator")

Resources = MutableMapping[str, Any]


@dataclass(frozen=True)
class Annotation:
    """One planned write to a method resource."""

    logical_id: str
    endpoint: EndpointDeclaration
    authorization_type: Optional[str] = None
    credentials: Optional[str] = None


def _method_properties(resources: Resources, logical_id: str, endpoint: EndpointDeclaration):
    resource = resources.get(logical_id)
    props = resource.get("Properties") if isinstance(resource, MutableMapping) else None
    if not isinstance(props, MutableMapping):
        raise ResourceNotFoundError(logical_id, method=endpoint.method, path=endpoint.path)
    return props


def plan_annotations(
    functions: Iterable[FunctionDeclaration],
    resources: Resources,
    settings: Optional[Settings] = None,
) -> list[Annotation]:
    """
    Resolve every flagged endpoint to its method resource without writing.

    Raises ResourceNotFoundError on the first endpoint whose logical id is not
    a method resource in ``resources``, or whose ``Integration`` cannot take
    ``Credentials``.
    """
    settings = settings or get_settings()
    planned: list[Annotation] = []

    for endpoint in iter_endpoints(functions):
        if not endpoint.flagged:
            logger.debug("%s %s: no auth flags, skipped", endpoint.method, endpoint.path)
            continue

        logical_id = method_logical_id(endpoint.path, endpoint.method)
        props = _method_properties(resources, logical_id, endpoint)
        if endpoint.invoke_with_caller_credentials and not isinstance(
            props.get("Integration", {}), MutableMapping
        ):
            raise ResourceNotFoundError(
                logical_id,
                method=endpoint.method,
                path=endpoint.path,
                reason="has a non-mapping Properties.Integration",
            )

        planned.append(
            Annotation(
                logical_id=logical_id,
                endpoint=endpoint,
                authorization_type=settings.authorization_type if endpoint.use_iam_auth else None,
                credentials=(
                    settings.caller_credentials_arn
                    if endpoint.invoke_with_caller_credentials
                    else None
                ),
            )
        )
        logger.debug("%s %s -> %s", endpoint.method, endpoint.path, logical_id)

    return planned


def apply_annotations(resources: Resources, annotations: Iterable[Annotation]) -> int:
    applied = 0
    for a in annotations:
        props = _method_properties(resources, a.logical_id, a.endpoint)
        if a.authorization_type is not None:
            props["AuthorizationType"] = a.authorization_type
        if a.credentials is not None:
            props.setdefault("Integration", {})["Credentials"] = a.credentials
        applied += 1
    return applied


def annotate_template(
    functions: Iterable[FunctionDeclaration],
    resources: Resources,
    settings: Optional[Settings] = None,
) -> list[Annotation]:
    """
    Plan, then write, the auth annotations for every flagged HTTP endpoint.

    All logical ids are resolved before the first write, so a missing
    resource leaves ``resources`` untouched.
    """
    annotations = plan_annotations(functions, resources, settings=settings)
    apply_annotations(resources, annotations)
    logger.info("Annotated %d API Gateway method(s)", len(annotations))
    return annotations
