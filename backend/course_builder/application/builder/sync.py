"""
Load and save whole builder documents through a content store.

Each save serializes the full tree and replaces the stored value; there
are no partial updates. Last write wins unless the caller supplies the
revision it last saw.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from course_builder.domain.exceptions import (
    Forbidden,
    PersistenceError,
    ValidationError,
)
from course_builder.domain.invariants.document import assert_document
from course_builder.domain.serialization import deserialize, serialize
from course_builder.domain.tree import Document
from course_builder.stores.base import ContentStore
from course_builder.widgets.registry import WidgetRegistry
from .gate import ENABLE, LOAD, SAVE, AllowAllGate, AuthGate

logger = logging.getLogger(__name__)

DATA_KEY = "_course_builder_data"
ENABLED_KEY = "_use_builder"

MAX_DOCUMENT_ID_LENGTH = 64


@dataclass(frozen=True)
class Ack:
    document_id: str
    revision: int
    saved_at: datetime


def validate_document_id(document_id) -> str:
    """Positive ints and non-empty strings of up to 64 characters; returns the string form."""
    if isinstance(document_id, bool):
        raise ValidationError("Invalid document id")

    if isinstance(document_id, int):
        if document_id <= 0:
            raise ValidationError("Invalid document id")
        return str(document_id)

    if not isinstance(document_id, str) or not document_id.strip():
        raise ValidationError("Missing document id")

    if len(document_id) > MAX_DOCUMENT_ID_LENGTH:
        raise ValidationError("Document id is too long")

    return document_id


class BuilderSync:
    def __init__(self, store: ContentStore, registry: WidgetRegistry, gate: Optional[AuthGate] = None):
        self.store = store
        self.registry = registry
        self.gate = gate or AllowAllGate()

    def _authorize(self, operation: str, document_id: str) -> None:
        if not self.gate.check(operation, document_id):
            logger.info("Denied %s on builder document %s", operation, document_id)
            raise Forbidden(f"Not allowed to {operation} builder document {document_id}")

    def load(self, document_id) -> Document:
        document_id = validate_document_id(document_id)
        self._authorize(LOAD, document_id)

        raw = self.store.get_meta(document_id, DATA_KEY)
        if not raw:
            return Document()
        return deserialize(raw)

    def revision(self, document_id) -> int:
        return self.store.get_revision(validate_document_id(document_id), DATA_KEY)

    def save(self, document_id, document: Document, expected_revision: Optional[int] = None) -> Ack:
        document_id = validate_document_id(document_id)
        self._authorize(SAVE, document_id)
        assert_document(document)

        payload = serialize(document, self.registry)
        try:
            revision = self.store.set_meta(
                document_id, DATA_KEY, payload, expected_revision=expected_revision
            )
        except PersistenceError:
            logger.error("Saving builder document %s failed", document_id)
            raise

        logger.debug("Saved builder document %s at revision %d", document_id, revision)
        return Ack(document_id=document_id, revision=revision, saved_at=datetime.now(timezone.utc))

    def is_enabled(self, document_id) -> bool:
        return self.store.get_meta(validate_document_id(document_id), ENABLED_KEY) == "1"

    def enable(self, document_id) -> Optional[Ack]:
        """
        Turn the builder on for a document. Stores an empty document when
        none exists yet and returns its Ack; otherwise returns None.
        """
        document_id = validate_document_id(document_id)
        self._authorize(ENABLE, document_id)

        self.store.set_meta(document_id, ENABLED_KEY, "1")
        if self.store.get_meta(document_id, DATA_KEY) is None:
            return self.save(document_id, Document(), expected_revision=0)
        return None

    def disable(self, document_id) -> None:
        """Turn the builder off. The stored document is kept."""
        document_id = validate_document_id(document_id)
        self._authorize(ENABLE, document_id)
        self.store.delete_meta(document_id, ENABLED_KEY)
