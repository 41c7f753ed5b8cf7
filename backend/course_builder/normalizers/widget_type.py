from typing import Any, Dict

from course_builder.widgets.fields import FieldDescriptor
from course_builder.widgets.registry import WidgetType


def normalize_field(descriptor: FieldDescriptor) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "name": descriptor.name,
        "label": descriptor.label,
        "type": descriptor.kind.value,
        "required": descriptor.required,
    }

    if descriptor.options:
        data["options"] = dict(descriptor.options)

    for key in ("default", "min", "max", "step", "description"):
        value = getattr(descriptor, key)
        if value is not None:
            data[key] = value

    if descriptor.condition:
        data["condition"] = dict(descriptor.condition)

    return data


def normalize_widget_type(widget_type: WidgetType, include_fields=False):
    data = {
        "type": widget_type.type,
        "name": widget_type.name,
        "description": widget_type.description,
        "icon": widget_type.icon,
    }

    if include_fields:
        data["fields"] = [normalize_field(f) for f in widget_type.fields]
        data["defaults"] = widget_type.defaults()

    return data
