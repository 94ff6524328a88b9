from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from apigw_auth.annotator.events import functions_from_mapping
from apigw_auth.domain.models import FunctionDeclaration
from apigw_auth.errors import DocumentLoadError


def _read_json(path: Path) -> Any:
    file_path = Path(path).expanduser().resolve()
    if not file_path.is_file():
        raise DocumentLoadError(f"'{path}' is not a readable file")
    try:
        return json.loads(file_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise DocumentLoadError(f"Could not read '{path}': {exc}") from exc
    except json.JSONDecodeError as exc:
        raise DocumentLoadError(f"'{path}' is not valid JSON: {exc}") from exc


def load_service(path: Path) -> list[FunctionDeclaration]:
    """Service document ({"functions": {...}}) -> declarations in file order."""
    doc = _read_json(path)
    functions = doc.get("functions") if isinstance(doc, dict) else None
    if not isinstance(functions, dict):
        raise DocumentLoadError(f"'{path}' has no 'functions' mapping")
    return functions_from_mapping(functions)


def load_template(path: Path) -> dict[str, Any]:
    doc = _read_json(path)
    if not isinstance(doc, dict) or not isinstance(doc.get("Resources"), dict):
        raise DocumentLoadError(f"'{path}' has no 'Resources' mapping")
    return doc


def write_template(template: dict[str, Any], path: Path) -> Path:
    out_path = Path(path).expanduser()
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(json.dumps(template, indent=2) + "\n", encoding="utf-8")
    return out_path
