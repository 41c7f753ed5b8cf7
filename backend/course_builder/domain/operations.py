"""
Editing operations on an in-memory builder document.

Every operation validates its input before touching the tree, so a
failed call leaves the document exactly as it was.
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from course_builder.normalizers.widget_type import normalize_field
from course_builder.widgets.fields import FieldKind, normalize_checkbox
from .exceptions import NodeNotFound, ValidationError
from .tree import (
    WIDGET_PREFIX,
    Column,
    Document,
    Section,
    Widget,
    generate_id,
    new_column,
    new_section,
)


def find_section(document: Document, section_id: str) -> Section:
    for section in document.sections:
        if section.id == section_id:
            return section
    raise NodeNotFound("Section", section_id)


def find_column(document: Document, column_id: str) -> Tuple[Section, Column]:
    for section, column in document.iter_columns():
        if column.id == column_id:
            return section, column
    raise NodeNotFound("Column", column_id)


def find_widget(document: Document, widget_id: str) -> Tuple[Section, Column, Widget]:
    for section, column, widget in document.iter_widgets():
        if widget.id == widget_id:
            return section, column, widget
    raise NodeNotFound("Widget", widget_id)


def add_section(document: Document) -> Section:
    """Append a section holding one full-width column."""
    section = new_section(document.all_ids())
    document.sections.append(section)
    return section


def add_widget(
    document: Document,
    widget_type: str,
    section_id: Optional[str] = None,
    *,
    registry,
) -> Widget:
    """
    Append a new widget with empty settings to the first column of the
    target section (the given one, otherwise the last one). Missing
    sections and columns are created on the way.
    """
    registry.get(widget_type)

    if section_id is not None:
        target = find_section(document, section_id)
    elif document.sections:
        target = document.sections[-1]
    else:
        target = add_section(document)

    taken = document.all_ids()
    if not target.columns:
        target.columns.append(new_column(taken))
        taken.add(target.columns[0].id)

    widget = Widget(id=generate_id(WIDGET_PREFIX, taken), type=widget_type)
    target.columns[0].widgets.append(widget)
    return widget


def delete_widget(document: Document, widget_id: str) -> Widget:
    """
    Remove a widget. Emptied columns and sections stay in place; an
    all-empty document is shown as the placeholder state.
    """
    _, column, widget = find_widget(document, widget_id)
    column.widgets.remove(widget)
    return widget


def delete_section(document: Document, section_id: str) -> Section:
    section = find_section(document, section_id)
    document.sections.remove(section)
    return section


def _permute(current: Sequence[Any], new_order: Sequence[str], what: str) -> List[Any]:
    if (
        isinstance(new_order, (str, bytes))
        or not isinstance(new_order, Sequence)
        or not all(isinstance(node_id, str) for node_id in new_order)
    ):
        raise ValidationError(f"New {what} order must be a list of ids")

    by_id = {node.id: node for node in current}
    if len(new_order) != len(by_id) or set(new_order) != set(by_id):
        raise ValidationError(
            f"New {what} order must list each existing id exactly once"
        )
    return [by_id[node_id] for node_id in new_order]


def reorder_widgets(document: Document, column_id: str, new_order: Sequence[str]) -> Column:
    """Change widget positions within one column; widgets themselves are untouched."""
    _, column = find_column(document, column_id)
    column.widgets[:] = _permute(column.widgets, new_order, "widget")
    return column


def reorder_sections(document: Document, new_order: Sequence[str]) -> List[Section]:
    document.sections[:] = _permute(document.sections, new_order, "section")
    return document.sections


def update_widget_settings(
    document: Document,
    widget_id: str,
    form: Mapping[str, Any],
    *,
    registry,
) -> Widget:
    """
    Replace a widget's settings wholesale with coerced form values.
    The widget keeps its id and type.
    """
    _, _, widget = find_widget(document, widget_id)
    settings = registry.coerce_settings(widget.type, form)
    widget.settings = settings
    return widget


def settings_form(document: Document, widget_id: str, *, registry) -> List[Dict[str, Any]]:
    """
    Fields to show when a widget is opened for editing, each paired with
    its current value or, when unset, the field default.
    """
    _, _, widget = find_widget(document, widget_id)

    form = []
    for descriptor in registry.get_fields(widget.type):
        value = widget.settings.get(descriptor.name)
        if value is None or value == "":
            value = descriptor.default if descriptor.default is not None else ""
        if descriptor.kind is FieldKind.CHECKBOX:
            value = normalize_checkbox(value)

        entry = normalize_field(descriptor)
        entry["value"] = value
        form.append(entry)

    return form
