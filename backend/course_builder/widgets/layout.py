"""
Public markup for a whole builder document: sections wrap a container
and a row of columns, columns carry their width inline, and each widget
sits in a wrapper that exposes its id, type and settings to the frontend.
"""
from __future__ import annotations

import json
import logging
from typing import Mapping

from markupsafe import Markup

from course_builder.domain.tree import Column, Document, Section, Widget
from course_builder.normalizers.column import normalize_width
from .registry import WidgetRegistry
from .renderers import _classes, _style, _tag

logger = logging.getLogger(__name__)


def _px(value) -> str | None:
    if value in (None, ""):
        return None
    return f"{value}px"


def render_widget(widget: Widget, registry: WidgetRegistry) -> Markup:
    if widget.type not in registry:
        logger.warning("Widget %s has unknown type %r, not rendered", widget.id, widget.type)
        return Markup("")

    attrs = {
        "class": f"course-builder-widget course-builder-widget-{widget.type}",
        "id": widget.id,
        "data-widget-id": widget.id,
        "data-widget-type": widget.type,
        "data-widget-settings": json.dumps(widget.settings, ensure_ascii=False),
    }
    return _tag("div", attrs, Markup(registry.render(widget.type, widget.settings)))


def render_column(column: Column, registry: WidgetRegistry) -> Markup:
    inner = Markup("").join(render_widget(w, registry) for w in column.widgets)
    attrs = {
        "class": _classes("course-builder-column", column.settings.get("css_class")),
        "id": column.id,
        "style": _style(width=f"{normalize_width(column.width)}%"),
    }
    return _tag("div", attrs, inner)


def _section_style(settings: Mapping) -> str:
    return _style(
        background_color=settings.get("background_color"),
        padding_top=_px(settings.get("padding_top")),
        padding_bottom=_px(settings.get("padding_bottom")),
    )


def render_section(section: Section, registry: WidgetRegistry) -> Markup:
    row = Markup("").join(render_column(c, registry) for c in section.columns)
    container = _tag(
        "div",
        {"class": "course-builder-container"},
        _tag("div", {"class": "course-builder-row"}, row),
    )
    attrs = {
        "class": _classes("course-builder-section", section.settings.get("css_class")),
        "id": section.id,
        "style": _section_style(section.settings),
    }
    return _tag("div", attrs, container)


def render_document(document: Document, registry: WidgetRegistry) -> str:
    """Markup for every section in order; an empty document renders as ``""``."""
    if not document.sections:
        return ""
    return str(Markup("").join(render_section(s, registry) for s in document.sections))
