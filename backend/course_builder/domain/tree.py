from __future__ import annotations

import itertools
import time
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Set, Tuple, Union

SettingValue = Union[str, int, float, bool]

DOCUMENT_VERSION = "1.0.0"
SUPPORTED_VERSIONS = frozenset({DOCUMENT_VERSION})
DEFAULT_COLUMN_WIDTH = 100.0

SECTION_PREFIX = "section"
COLUMN_PREFIX = "col"
WIDGET_PREFIX = "widget"

_counter = itertools.count()


def generate_id(prefix: str, taken: Optional[Set[str]] = None) -> str:
    """
    Mint `<prefix>_<milliseconds>_<n>`.

    `n` comes from a process-wide counter, so ids minted within the same
    millisecond still differ. `taken` guards against collisions with ids
    already present in a loaded document.
    """
    while True:
        candidate = f"{prefix}_{int(time.time() * 1000)}_{next(_counter)}"
        if not taken or candidate not in taken:
            return candidate


@dataclass
class Widget:
    id: str
    type: str
    settings: Dict[str, SettingValue] = field(default_factory=dict)


@dataclass
class Column:
    id: str
    width: float = DEFAULT_COLUMN_WIDTH
    settings: Dict[str, SettingValue] = field(default_factory=dict)
    widgets: List[Widget] = field(default_factory=list)


@dataclass
class Section:
    id: str
    settings: Dict[str, SettingValue] = field(default_factory=dict)
    columns: List[Column] = field(default_factory=list)


@dataclass
class Document:
    version: str = DOCUMENT_VERSION
    sections: List[Section] = field(default_factory=list)

    def iter_columns(self) -> Iterator[Tuple[Section, Column]]:
        for section in self.sections:
            for column in section.columns:
                yield section, column

    def iter_widgets(self) -> Iterator[Tuple[Section, Column, Widget]]:
        for section, column in self.iter_columns():
            for widget in column.widgets:
                yield section, column, widget

    def all_ids(self) -> Set[str]:
        ids = {s.id for s in self.sections}
        for _, column in self.iter_columns():
            ids.add(column.id)
            ids.update(w.id for w in column.widgets)
        return ids

    @property
    def is_empty(self) -> bool:
        """True for zero sections and for sections holding no widgets at all."""
        return not any(True for _ in self.iter_widgets())


def new_column(taken: Optional[Set[str]] = None) -> Column:
    return Column(id=generate_id(COLUMN_PREFIX, taken), width=DEFAULT_COLUMN_WIDTH)


def new_section(taken: Optional[Set[str]] = None) -> Section:
    section = Section(id=generate_id(SECTION_PREFIX, taken))
    section.columns.append(new_column(taken))
    return section
