from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Tuple, Union

from course_builder.domain.exceptions import ValidationError
from course_builder.domain.tree import SettingValue

CHECKBOX_TRUE = {"1", "true", "on", "yes"}
HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


class FieldKind(str, Enum):
    TEXT = "text"
    URL = "url"
    EMAIL = "email"
    TEXTAREA = "textarea"
    SELECT = "select"
    CHECKBOX = "checkbox"
    NUMBER = "number"
    COLOR = "color"
    IMAGE = "image"


@dataclass(frozen=True)
class FieldDescriptor:
    """
    One entry of a widget's settings form.

    `kind` decides both the editor control and the coercion rule used when
    reading raw form input. `condition` maps another field's name to the
    value that makes this field visible.
    """
    name: str
    label: str
    kind: FieldKind = FieldKind.TEXT
    default: Optional[SettingValue] = None
    options: Tuple[Tuple[str, str], ...] = ()
    min: Optional[float] = None
    max: Optional[float] = None
    step: Optional[float] = None
    description: Optional[str] = None
    required: bool = False
    condition: Mapping[str, str] = field(default_factory=dict)

    @property
    def option_values(self) -> Tuple[str, ...]:
        return tuple(value for value, _ in self.options)


def normalize_checkbox(raw: Any) -> int:
    if isinstance(raw, bool):
        return int(raw)
    if isinstance(raw, (int, float)):
        return 1 if raw else 0
    if raw is None:
        return 0
    return 1 if str(raw).strip().lower() in CHECKBOX_TRUE else 0


def _is_blank(raw: Any) -> bool:
    return raw is None or (isinstance(raw, str) and not raw.strip())


def _to_number(descriptor: FieldDescriptor, raw: Any) -> Union[int, float]:
    if isinstance(raw, bool):
        raise ValidationError(f"Field '{descriptor.name}' expects a number")

    if isinstance(raw, (int, float)):
        number: Union[int, float] = raw
    else:
        text = str(raw).strip()
        try:
            number = int(text)
        except ValueError:
            try:
                number = float(text)
            except ValueError as exc:
                raise ValidationError(
                    f"Field '{descriptor.name}' expects a number, got {raw!r}"
                ) from exc

    if number != number or number in (float("inf"), float("-inf")):
        raise ValidationError(f"Field '{descriptor.name}' expects a finite number")

    if descriptor.min is not None and number < descriptor.min:
        number = descriptor.min
    if descriptor.max is not None and number > descriptor.max:
        number = descriptor.max

    if isinstance(number, float) and number.is_integer() and not isinstance(raw, float):
        return int(number)
    return number


def coerce_value(descriptor: FieldDescriptor, raw: Any) -> Optional[SettingValue]:
    """
    Coerce one raw form value according to the field's kind.

    Returns None when the value counts as "not submitted" (a blank number).
    Strings are stored as given; escaping is the renderer's job.
    """
    if isinstance(raw, (list, tuple, dict, set)):
        raise ValidationError(f"Field '{descriptor.name}' expects a single value")

    kind = descriptor.kind

    if kind is FieldKind.CHECKBOX:
        return normalize_checkbox(raw)

    if kind is FieldKind.NUMBER:
        if _is_blank(raw):
            if descriptor.required:
                raise ValidationError(f"Field '{descriptor.name}' is required")
            return None
        return _to_number(descriptor, raw)

    value = "" if raw is None else str(raw)

    if descriptor.required and not value.strip():
        raise ValidationError(f"Field '{descriptor.name}' is required")

    if kind is FieldKind.SELECT and descriptor.options:
        if value not in descriptor.option_values:
            raise ValidationError(
                f"Field '{descriptor.name}' must be one of {list(descriptor.option_values)}"
            )

    if kind is FieldKind.COLOR and value and not HEX_COLOR.match(value):
        raise ValidationError(f"Field '{descriptor.name}' expects a hex color")

    return value
