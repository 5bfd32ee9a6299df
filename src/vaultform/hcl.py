"""HCL loading: render and parse .hcl files into resource declarations."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import hcl2
import jinja2
from lark import LarkError

if TYPE_CHECKING:
    from .resources import Registry
    from .workspace import Workspace

logger = logging.getLogger(__name__)


def scan(
    path: str | Path,
    registry: Registry,
    *,
    recurse: bool = True,
    context: dict[str, Any] | None = None,
) -> Workspace:
    """Scan a directory for .hcl files and return a ready Workspace."""
    from .workspace import Workspace

    ws = Workspace(registry, context=context)
    ws.scan(path, recurse=recurse)
    return ws


def _strip_meta(data: Any) -> Any:
    """Drop parser bookkeeping keys such as '__start_line__'."""
    if isinstance(data, dict):
        return {k: _strip_meta(v) for k, v in data.items() if not k.startswith("__")}
    if isinstance(data, list):
        return [_strip_meta(item) for item in data]
    return data


def load(
    file: Path,
    *,
    context: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Load and parse a single HCL file, rendering Jinja2 templates with context."""
    text = file.read_text()
    env = jinja2.Environment(
        undefined=jinja2.StrictUndefined,
        keep_trailing_newline=True,
        autoescape=False,
    )
    try:
        text = env.from_string(text).render(context or {})
    except jinja2.TemplateError as exc:
        raise ValueError(f"{file}: {exc}") from exc
    try:
        data = hcl2.loads(text)
    except LarkError as exc:
        raise ValueError(f"{file}: {exc}") from exc
    return _strip_meta(data)
