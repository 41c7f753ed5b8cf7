import logging

from course_builder.domain.tree import Column
from .widget import normalize_widget

logger = logging.getLogger(__name__)


def normalize_width(width: float):
    width = float(width)
    return int(width) if width.is_integer() else width


def normalize_column(column: Column, registry=None):
    """
    Widgets without a resolvable type are left out of the output. A bad
    widget never aborts the surrounding save.
    """
    widgets = []
    for widget in column.widgets:
        if not widget.type or (registry is not None and widget.type not in registry):
            logger.warning(
                "Dropping widget %s in column %s: unresolvable type %r",
                widget.id,
                column.id,
                widget.type,
            )
            continue
        widgets.append(normalize_widget(widget))

    return {
        "id": column.id,
        "width": normalize_width(column.width),
        "settings": dict(column.settings),
        "widgets": widgets,
    }
