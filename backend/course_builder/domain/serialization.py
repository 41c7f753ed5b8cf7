"""
JSON (de)serialization of builder documents.

Deserialization repairs rather than rejects: a damaged builder document
must never take down the page that embeds it. The one exception is an
unknown `version`, which fails closed instead of being read as the
current format.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Set, Union

from course_builder.normalizers.document import normalize_document
from .exceptions import ParseError, UnsupportedDocumentVersion
from .tree import (
    COLUMN_PREFIX,
    DEFAULT_COLUMN_WIDTH,
    DOCUMENT_VERSION,
    SECTION_PREFIX,
    SUPPORTED_VERSIONS,
    WIDGET_PREFIX,
    Column,
    Document,
    Section,
    SettingValue,
    Widget,
    generate_id,
)

logger = logging.getLogger(__name__)

RawDocument = Union[str, bytes, bytearray, Mapping[str, Any], None]


def serialize(document: Document, registry=None) -> str:
    """
    Serialize a document to its stored JSON form.

    With a registry, widgets whose type is not registered are dropped;
    widgets with an empty type are always dropped.
    """
    return json.dumps(normalize_document(document, registry), ensure_ascii=False)


def deserialize(raw: RawDocument) -> Document:
    try:
        payload = _decode(raw)
    except ParseError as exc:
        logger.warning("Unreadable builder document, using an empty one: %s", exc)
        return Document()

    version = payload.get("version", DOCUMENT_VERSION)
    if not isinstance(version, str) or version not in SUPPORTED_VERSIONS:
        raise UnsupportedDocumentVersion(str(version))

    taken: Set[str] = set()
    sections = [
        section
        for section in (
            _section(raw_section, index, taken)
            for index, raw_section in enumerate(_as_list(payload.get("sections"), "sections"))
        )
        if section is not None
    ]

    return Document(version=DOCUMENT_VERSION, sections=sections)


def _decode(raw: RawDocument) -> Mapping[str, Any]:
    if raw is None:
        raise ParseError("document is empty")

    if isinstance(raw, Mapping):
        return raw

    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="replace")

    if not isinstance(raw, str) or not raw.strip():
        raise ParseError("document is empty")

    try:
        payload = json.loads(raw)
    except ValueError as exc:
        raise ParseError(f"invalid JSON: {exc}") from exc

    if not isinstance(payload, dict):
        raise ParseError(f"expected an object, got {type(payload).__name__}")

    return payload


def _as_list(value: Any, what: str) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        logger.warning("Builder document: %s is not a list, treating as empty", what)
        return []
    return value


def _claim_id(raw_id: Any, prefix: str, taken: Set[str]) -> str:
    if isinstance(raw_id, int) and not isinstance(raw_id, bool):
        raw_id = str(raw_id)

    if isinstance(raw_id, str) and raw_id.strip() and raw_id not in taken:
        taken.add(raw_id)
        return raw_id

    fresh = generate_id(prefix, taken)
    logger.warning("Builder document: replacing id %r with %s", raw_id, fresh)
    taken.add(fresh)
    return fresh


def _settings(raw: Any, owner: str) -> Dict[str, SettingValue]:
    if not isinstance(raw, Mapping):
        return {}

    settings: Dict[str, SettingValue] = {}
    for key, value in raw.items():
        if isinstance(value, (str, int, float, bool)):
            settings[str(key)] = value
        else:
            logger.warning("Builder document: dropping non-scalar setting %r on %s", key, owner)
    return settings


def _width(raw: Any) -> float:
    if raw is None:
        return DEFAULT_COLUMN_WIDTH
    try:
        width = float(raw)
    except (TypeError, ValueError):
        return DEFAULT_COLUMN_WIDTH
    if isinstance(raw, bool) or width != width or width <= 0:
        return DEFAULT_COLUMN_WIDTH
    return min(width, DEFAULT_COLUMN_WIDTH)


def _section(raw: Any, index: int, taken: Set[str]) -> Optional[Section]:
    if not isinstance(raw, Mapping):
        logger.warning("Builder document: skipping malformed section at position %d", index)
        return None

    section = Section(id=_claim_id(raw.get("id"), SECTION_PREFIX, taken))
    section.settings = _settings(raw.get("settings"), section.id)
    for col_index, raw_column in enumerate(_as_list(raw.get("columns"), f"{section.id}.columns")):
        column = _column(raw_column, col_index, taken)
        if column is not None:
            section.columns.append(column)
    return section


def _column(raw: Any, index: int, taken: Set[str]) -> Optional[Column]:
    if not isinstance(raw, Mapping):
        logger.warning("Builder document: skipping malformed column at position %d", index)
        return None

    column = Column(
        id=_claim_id(raw.get("id"), COLUMN_PREFIX, taken),
        width=_width(raw.get("width")),
    )
    column.settings = _settings(raw.get("settings"), column.id)
    for raw_widget in _as_list(raw.get("widgets"), f"{column.id}.widgets"):
        widget = _widget(raw_widget, taken)
        if widget is not None:
            column.widgets.append(widget)
    return column


def _widget(raw: Any, taken: Set[str]) -> Optional[Widget]:
    if not isinstance(raw, Mapping):
        logger.warning("Builder document: skipping malformed widget entry")
        return None

    widget_type = raw.get("type")
    if not isinstance(widget_type, str) or not widget_type.strip():
        logger.warning("Builder document: dropping widget %r without a type", raw.get("id"))
        return None

    widget = Widget(id=_claim_id(raw.get("id"), WIDGET_PREFIX, taken), type=widget_type)
    widget.settings = _settings(raw.get("settings"), widget.id)
    return widget
