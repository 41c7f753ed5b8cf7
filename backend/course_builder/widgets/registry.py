from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple

from course_builder.domain.exceptions import UnknownWidgetType, ValidationError
from .fields import FieldDescriptor, SettingValue, coerce_value

logger = logging.getLogger(__name__)

Renderer = Callable[[Mapping[str, Any]], str]


@dataclass(frozen=True)
class WidgetType:
    type: str
    name: str
    fields: Tuple[FieldDescriptor, ...]
    render: Renderer
    description: str = ""
    icon: str = ""

    def defaults(self) -> Dict[str, SettingValue]:
        return {f.name: f.default for f in self.fields if f.default is not None}


class WidgetRegistry:
    """
    Catalog of widget types available to the editor and the render layer.

    Constructed explicitly and handed to whatever needs it, so tests can
    build a registry holding only fake types.
    """

    def __init__(self, widget_types: Optional[List[WidgetType]] = None):
        self._types: Dict[str, WidgetType] = {}
        for widget_type in widget_types or []:
            self.register(widget_type)

    def register(self, widget_type: WidgetType) -> None:
        if not widget_type.type:
            raise ValueError("Widget type key cannot be empty")

        names = [f.name for f in widget_type.fields]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate field names in widget type '{widget_type.type}'")

        self._types[widget_type.type] = widget_type

    def __contains__(self, widget_type: object) -> bool:
        return isinstance(widget_type, str) and widget_type in self._types

    def __iter__(self) -> Iterator[WidgetType]:
        return iter(self._types.values())

    def __len__(self) -> int:
        return len(self._types)

    def types(self) -> List[str]:
        return list(self._types)

    def get(self, widget_type: str) -> WidgetType:
        try:
            return self._types[widget_type]
        except (KeyError, TypeError):
            raise UnknownWidgetType(widget_type) from None

    def get_fields(self, widget_type: str) -> Tuple[FieldDescriptor, ...]:
        return self.get(widget_type).fields

    def get_defaults(self, widget_type: str) -> Dict[str, SettingValue]:
        return self.get(widget_type).defaults()

    def coerce_settings(
        self,
        widget_type: str,
        form: Mapping[str, Any],
    ) -> Dict[str, SettingValue]:
        """
        Build a stored settings mapping from raw form values.

        Only declared fields are read; a declared field missing from the form
        is left out rather than zeroed, and so is a blank number.
        """
        fields = self.get_fields(widget_type)

        if not isinstance(form, Mapping):
            raise ValidationError("Widget settings must be an object")

        settings: Dict[str, SettingValue] = {}
        for descriptor in fields:
            if descriptor.name not in form:
                continue
            value = coerce_value(descriptor, form[descriptor.name])
            if value is not None:
                settings[descriptor.name] = value

        ignored = set(form) - {f.name for f in fields}
        if ignored:
            logger.debug(
                "Ignoring undeclared settings for widget type %s: %s",
                widget_type,
                sorted(ignored),
            )

        return settings

    def render(self, widget_type: str, settings: Optional[Mapping[str, Any]] = None) -> str:
        """
        Render one widget. Defaults are merged here, at render time.
        Unknown types render as empty output.
        """
        try:
            entry = self.get(widget_type)
        except UnknownWidgetType:
            logger.warning("Skipping render of unknown widget type %r", widget_type)
            return ""

        merged: Dict[str, Any] = entry.defaults()
        merged.update(settings or {})
        return entry.render(merged)
