from __future__ import annotations

import re

METHOD_PREFIX = "ApiGatewayMethod"
RESOURCE_PREFIX = "ApiGatewayResource"

# greedy: "{a}-{b}" collapses to one "...Var", same as the template generator
_PLACEHOLDER = re.compile(r"\{(.*)\}")
_NON_ALNUM = re.compile(r"[^0-9A-Za-z]")


def _upper_first(text: str) -> str:
    return text[:1].upper() + text[1:]


def normalize_path_part(segment: str) -> str:
    """
    One path segment -> the fragment the template generator uses for it.

      my-path -> MyDashpath
      {id}    -> IdVar
      Items   -> Items
    """
    part = _upper_first(segment.lower())
    part = part.replace("-", "Dash")
    part = _PLACEHOLDER.sub(r"\1Var", part)
    part = _NON_ALNUM.sub("", part)
    return _upper_first(part)


def normalize_path(path: str) -> str:
    # /users/{id} -> UsersIdVar ; empty segments contribute nothing
    return "".join(normalize_path_part(seg) for seg in path.split("/"))


def normalize_method(method: str) -> str:
    # get -> Get, POST -> Post
    return method[:1].upper() + method[1:].lower()


def method_logical_id(path: str, method: str) -> str:
    return f"{METHOD_PREFIX}{normalize_path(path)}{normalize_method(method)}"


def resource_logical_id(path: str) -> str:
    return f"{RESOURCE_PREFIX}{normalize_path(path)}"
