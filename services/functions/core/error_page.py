"""
Error page rendering for browser clients.

The renderer is a collaborator of the invocation error path; the default
implementation renders a Jinja2 template shipped with the package.
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from jinja2 import Environment, FileSystemLoader

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"


class ErrorPageRenderer(Protocol):
    async def render(self, error_string: str, kind: str) -> str: ...


def _parse_error(error_string: str) -> Optional[Dict[str, Any]]:
    try:
        parsed = json.loads(error_string)
    except ValueError:
        return None
    if not isinstance(parsed, dict):
        return None
    return parsed


class JinjaErrorPageRenderer:
    def __init__(self, template_dir: Path = TEMPLATE_DIR):
        self.env = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    async def render(self, error_string: str, kind: str) -> str:
        template = self.env.get_template("error_page.html.j2")
        error = _parse_error(error_string)

        context = {
            "kind": kind,
            "raw": error_string,
            "error_type": None,
            "error_message": None,
            "trace": [],
        }
        if error is not None:
            context["error_type"] = error.get("errorType")
            context["error_message"] = error.get("errorMessage")
            context["trace"] = error.get("trace") or []

        return template.render(context)
