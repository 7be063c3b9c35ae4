# File: daogen/renderer.py
"""
DaoGen - Template Renderer
===========================
Thin wrapper over a Jinja2 ``Environment`` rooted at the template
directory.  Templates are looked up by name; the render context keys
(``className``, ``primaryKeys`` ...) are exposed as template globals.

Undefined names are errors (``StrictUndefined``): a template that refers
to a key the context does not carry fails instead of emitting blanks.
Autoescaping is off because the output is source code, not HTML.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Union

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    Template,
    TemplateError,
    TemplateNotFound,
)

from daogen.errors import TemplateRenderError
from daogen.mapping import camelize
from daogen.utils import lower_first, to_snake_case

logger: logging.Logger = logging.getLogger("daogen.renderer")


class TemplateRenderer:
    """Renders named templates from one template directory."""

    def __init__(self, template_directory: Union[str, Path]) -> None:
        self.template_directory: Path = Path(template_directory)
        self._env: Environment = Environment(  # nosec B701 - output is source code
            loader=FileSystemLoader(str(self.template_directory)),
            undefined=StrictUndefined,
            autoescape=False,
            keep_trailing_newline=True,
        )
        self._env.filters["camelize"] = camelize
        self._env.filters["lower_first"] = lower_first
        self._env.filters["snake_case"] = to_snake_case

    def get_template(self, template_name: str) -> Template:
        try:
            return self._env.get_template(template_name)
        except TemplateNotFound as exc:
            raise TemplateRenderError(
                f"Template {template_name!r} not found in {self.template_directory}",
                template_name=template_name,
            ) from exc
        except TemplateError as exc:
            raise TemplateRenderError(
                f"Template {template_name!r} could not be loaded: {exc}",
                template_name=template_name,
            ) from exc

    def render(self, template_name: str, context: Mapping[str, Any]) -> str:
        """
        Render *template_name* with *context* and return the text.

        Raises:
            TemplateRenderError: missing template, syntax error, or a
                failure while rendering (undefined reference included).
        """
        template: Template = self.get_template(template_name)
        try:
            text: str = template.render(context)
        except TemplateError as exc:
            raise TemplateRenderError(
                f"Rendering {template_name!r} failed: {exc}",
                template_name=template_name,
            ) from exc
        logger.debug("Rendered %s (%d chars).", template_name, len(text))
        return text

    def __repr__(self) -> str:
        return f"<TemplateRenderer {self.template_directory}>"


__all__ = ["TemplateRenderer"]
