"""
Editor surface snapshots.

A surface is the tree an editing client displays: section nodes holding
column nodes holding widget nodes, possibly with wrapper nodes in
between. The in-memory Document stays the source of truth; surfaces are
built from it, and a posted surface snapshot can be read back into a
Document.
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Set

from markupsafe import Markup

from course_builder.normalizers.column import normalize_width
from .exceptions import ValidationError
from .tree import (
    COLUMN_PREFIX,
    DEFAULT_COLUMN_WIDTH,
    SECTION_PREFIX,
    WIDGET_PREFIX,
    Column,
    Document,
    Section,
    SettingValue,
    Widget,
    generate_id,
)

logger = logging.getLogger(__name__)

SECTION_ID_ATTR = "data-section-id"
COLUMN_ID_ATTR = "data-column-id"
WIDGET_ID_ATTR = "data-widget-id"
WIDGET_TYPE_ATTR = "data-widget-type"
WIDGET_SETTINGS_ATTR = "data-widget-settings"

PERCENT = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*%\s*$")
LENGTH = re.compile(r"^\s*(\d+(?:\.\d+)?)")


@dataclass
class SurfaceNode:
    role: Optional[str] = None  # "editor", "section", "column", "widget" or None for wrappers
    attrs: Dict[str, str] = field(default_factory=dict)
    width: Optional[str] = None
    parent_width: Optional[float] = None
    children: List["SurfaceNode"] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SurfaceNode":
        """Build a node tree from posted JSON; any malformed level is a ValidationError."""
        if not isinstance(data, Mapping):
            raise ValidationError("Surface nodes must be objects")

        attrs = data.get("attrs") or {}
        if not isinstance(attrs, Mapping):
            raise ValidationError("Surface node attrs must be an object")

        children = data.get("children") or []
        if not isinstance(children, list):
            raise ValidationError("Surface node children must be a list")

        role = data.get("role")
        width = data.get("width")
        return cls(
            role=role if isinstance(role, str) else None,
            attrs={str(k): str(v) for k, v in attrs.items()},
            width=None if width is None else str(width),
            parent_width=data.get("parent_width"),
            children=[cls.from_dict(child) for child in children],
        )


class SettingsCache:
    """
    Side table of widget settings keyed by widget id.

    Filled by edits, or lazily from a widget node's settings attribute,
    which is parsed once and then served from the table.
    """

    def __init__(self):
        self._settings: Dict[str, Dict[str, SettingValue]] = {}

    def __contains__(self, widget_id: str) -> bool:
        return widget_id in self._settings

    def put(self, widget_id: str, settings: Mapping[str, SettingValue]) -> None:
        self._settings[widget_id] = dict(settings)

    def settings_for(self, widget_id: str, node: SurfaceNode) -> Dict[str, SettingValue]:
        if widget_id in self._settings:
            return dict(self._settings[widget_id])

        raw = node.attrs.get(WIDGET_SETTINGS_ATTR)
        if not raw:
            return {}

        try:
            parsed = json.loads(Markup(raw).unescape())
        except ValueError:
            logger.error("Unparseable settings attribute on widget %s", widget_id)
            return {}

        if not isinstance(parsed, dict):
            return {}

        settings = {
            k: v for k, v in parsed.items() if isinstance(v, (str, int, float, bool))
        }
        self._settings[widget_id] = settings
        return dict(settings)


def resolve_width(width: Optional[str], parent_width: Optional[float]) -> float:
    """
    Percentage widths are taken as-is. Absolute lengths are converted
    against the parent's rendered width; without a usable parent width,
    or for anything unparseable, the column is full width.
    """
    if not width:
        return DEFAULT_COLUMN_WIDTH

    match = PERCENT.match(str(width))
    if match:
        value = float(match.group(1))
        return value if 0 < value <= 100 else DEFAULT_COLUMN_WIDTH

    match = LENGTH.match(str(width))
    try:
        parent = float(parent_width) if parent_width is not None else 0.0
    except (TypeError, ValueError):
        parent = 0.0
    if not match or parent <= 0:
        return DEFAULT_COLUMN_WIDTH

    value = float(match.group(1)) / parent * 100
    return value if 0 < value <= 100 else DEFAULT_COLUMN_WIDTH


def _find(node: SurfaceNode, role: str) -> List[SurfaceNode]:
    found: List[SurfaceNode] = []
    for child in node.children:
        if child.role == role:
            found.append(child)
        else:
            found.extend(_find(child, role))
    return found


def _node_id(node: SurfaceNode, attr: str, prefix: str, taken: Set[str]) -> str:
    node_id = node.attrs.get(attr)
    if not node_id or node_id in taken:
        node_id = generate_id(prefix, taken)
        node.attrs[attr] = node_id
    taken.add(node_id)
    return node_id


def extract_from_surface(surface: SurfaceNode, cache: SettingsCache) -> Document:
    """
    Read the current tree out of a surface snapshot. Missing ids are
    minted and written back onto the nodes; widgets without a type are
    skipped.
    """
    document = Document()
    taken: Set[str] = set()

    for section_node in _find(surface, "section"):
        section = Section(id=_node_id(section_node, SECTION_ID_ATTR, SECTION_PREFIX, taken))

        for column_node in _find(section_node, "column"):
            column = Column(
                id=_node_id(column_node, COLUMN_ID_ATTR, COLUMN_PREFIX, taken),
                width=resolve_width(column_node.width, column_node.parent_width),
            )

            for widget_node in _find(column_node, "widget"):
                widget_id = _node_id(widget_node, WIDGET_ID_ATTR, WIDGET_PREFIX, taken)
                widget_type = widget_node.attrs.get(WIDGET_TYPE_ATTR)
                if not widget_type:
                    logger.warning("Widget %s has no type, skipping", widget_id)
                    continue

                column.widgets.append(
                    Widget(
                        id=widget_id,
                        type=widget_type,
                        settings=cache.settings_for(widget_id, widget_node),
                    )
                )

            section.columns.append(column)
        document.sections.append(section)

    return document


def build_surface(document: Document, cache: SettingsCache) -> SurfaceNode:
    """Lay out a surface for a document and prime the settings table."""
    root = SurfaceNode(role="editor")

    for section in document.sections:
        section_node = SurfaceNode(role="section", attrs={SECTION_ID_ATTR: section.id})
        content = SurfaceNode()
        section_node.children.append(content)

        for column in section.columns:
            widgets_list = SurfaceNode()
            column_node = SurfaceNode(
                role="column",
                attrs={COLUMN_ID_ATTR: column.id},
                width=f"{normalize_width(column.width)}%",
                children=[widgets_list],
            )

            for widget in column.widgets:
                cache.put(widget.id, widget.settings)
                widgets_list.children.append(
                    SurfaceNode(
                        role="widget",
                        attrs={
                            WIDGET_ID_ATTR: widget.id,
                            WIDGET_TYPE_ATTR: widget.type,
                            WIDGET_SETTINGS_ATTR: json.dumps(widget.settings),
                        },
                    )
                )

            content.children.append(column_node)
        root.children.append(section_node)

    return root
