"""
Host-facing entry point.

The deployment framework instantiates the plugin with its service object and
CLI options, then calls ``hooks["deploy:compileEvents"]`` once, after the
compiled template holds the API Gateway resources and before it is written.

Declare auth per HTTP event::

    functions:
      getItem:
        handler: items.get
        events:
          - http:
              method: GET
              path: items/{id}
              useIAMAuth: true
              invokeWithCallerCredentials: true
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional

from apigw_auth.annotator.annotate import Annotation, annotate_template
from apigw_auth.annotator.events import functions_from_mapping, host_field
from apigw_auth.config import Settings
from apigw_auth.errors import ServiceConfigError

logger = logging.getLogger("apigw_auth.plugin")

COMPILE_EVENTS_HOOK = "deploy:compileEvents"


class ApiGatewayAuthPlugin:
    def __init__(
        self,
        serverless: Any,
        options: Optional[Mapping[str, Any]] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.serverless = serverless
        self.options = dict(options or {})
        self.settings = settings
        self.hooks: dict[str, Callable[[], list[Annotation]]] = {
            COMPILE_EVENTS_HOOK: self.compile_events,
        }

    def _functions(self, service: Any) -> dict[str, Any]:
        functions = host_field(service, "functions") or {}
        get_all = getattr(service, "get_all_functions", None)
        if callable(get_all):
            # host decides the order
            ordered: dict[str, Any] = {}
            for name in get_all():
                if name not in functions:
                    raise ServiceConfigError(f"function '{name}' has no declaration in the service")
                ordered[name] = functions[name]
            return ordered
        return dict(functions)

    def compile_events(self) -> list[Annotation]:
        service = host_field(self.serverless, "service")
        provider = host_field(service, "provider")
        template = host_field(provider, "compiledCloudFormationTemplate")
        resources = host_field(template, "Resources")
        if resources is None:
            resources = {}

        declarations = functions_from_mapping(self._functions(service))
        annotations = annotate_template(declarations, resources, settings=self.settings)
        logger.debug("%s: %d annotation(s)", COMPILE_EVENTS_HOOK, len(annotations))
        return annotations
