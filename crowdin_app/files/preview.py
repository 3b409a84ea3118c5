"""HTML preview of the strings extracted from a file."""

from __future__ import annotations

import html
import logging
from functools import lru_cache
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape

from ..schemas.files import PreviewString

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"


@lru_cache(maxsize=1)
def _environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(["html"]),
    )


def render_preview_html(file_name: str, strings: dict[str, PreviewString]) -> str:
    try:
        template = _environment().get_template("preview.html")
        return template.render(file_name=file_name, strings=strings)
    except TemplateError:
        logger.exception("Error rendering preview for %s", file_name)
        safe_name = html.escape(file_name)
        return f"<html><body><h1>Error rendering preview for {safe_name}</h1></body></html>"
