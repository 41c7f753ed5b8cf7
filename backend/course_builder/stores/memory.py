from typing import Dict, Optional, Tuple

from course_builder.domain.exceptions import RevisionConflict
from .base import ContentStore


class InMemoryContentStore(ContentStore):
    """Dict-backed store for tests and scripting."""

    def __init__(self):
        self._data: Dict[Tuple[str, str], Tuple[str, int]] = {}

    def get_meta(self, document_id, key):
        entry = self._data.get((document_id, key))
        return entry[0] if entry else None

    def set_meta(self, document_id, key, value, expected_revision: Optional[int] = None):
        current = self.get_revision(document_id, key)
        if expected_revision is not None and expected_revision != current:
            raise RevisionConflict(expected_revision, current)

        self._data[(document_id, key)] = (value, current + 1)
        return current + 1

    def delete_meta(self, document_id, key):
        self._data.pop((document_id, key), None)

    def get_revision(self, document_id, key):
        entry = self._data.get((document_id, key))
        return entry[1] if entry else 0
