from typing import Any, Dict, List, Mapping, Optional, Sequence

from course_builder.domain import operations
from course_builder.domain.tree import Column, Document, Section, Widget
from .sync import Ack, BuilderSync


class EditorSession:
    """
    The document of one content item, opened for editing.

    Every mutation is applied in memory and then saved in full. A failed
    save propagates; the applied change stays in `document` so the next
    save carries it.
    """

    def __init__(self, sync: BuilderSync, document_id, document: Document, revision: Optional[int] = None):
        self.sync = sync
        self.document_id = document_id
        self.document = document
        self.revision = revision
        self.last_ack: Optional[Ack] = None

    @classmethod
    def open(cls, sync: BuilderSync, document_id, expected_revision: Optional[int] = None) -> "EditorSession":
        """
        Load a document for editing. With `expected_revision`, saves made
        by this session only succeed while nobody else has written.
        """
        document = sync.load(document_id)
        return cls(sync, document_id, document, revision=expected_revision)

    @property
    def registry(self):
        return self.sync.registry

    @property
    def is_empty(self) -> bool:
        return self.document.is_empty

    def save(self) -> Ack:
        ack = self.sync.save(self.document_id, self.document, expected_revision=self.revision)
        if self.revision is not None:
            self.revision = ack.revision
        self.last_ack = ack
        return ack

    def add_section(self) -> Section:
        section = operations.add_section(self.document)
        self.save()
        return section

    def add_widget(self, widget_type: str, section_id: Optional[str] = None) -> Widget:
        widget = operations.add_widget(
            self.document, widget_type, section_id, registry=self.registry
        )
        self.save()
        return widget

    def delete_widget(self, widget_id: str) -> Widget:
        widget = operations.delete_widget(self.document, widget_id)
        self.save()
        return widget

    def delete_section(self, section_id: str) -> Section:
        section = operations.delete_section(self.document, section_id)
        self.save()
        return section

    def reorder_widgets(self, column_id: str, new_order: Sequence[str]) -> Column:
        column = operations.reorder_widgets(self.document, column_id, new_order)
        self.save()
        return column

    def reorder_sections(self, new_order: Sequence[str]) -> List[Section]:
        sections = operations.reorder_sections(self.document, new_order)
        self.save()
        return sections

    def update_widget_settings(self, widget_id: str, form: Mapping[str, Any]) -> Widget:
        widget = operations.update_widget_settings(
            self.document, widget_id, form, registry=self.registry
        )
        self.save()
        return widget

    def settings_form(self, widget_id: str) -> List[Dict[str, Any]]:
        return operations.settings_form(self.document, widget_id, registry=self.registry)
