import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from course_builder.domain.exceptions import PersistenceError, RevisionConflict
from course_builder.extensions import db
from course_builder.models.base import utc_now
from course_builder.models.content_meta import ContentMeta
from course_builder.utils.transaction import transactional
from .base import ContentStore

logger = logging.getLogger(__name__)


class SQLAlchemyContentStore(ContentStore):
    """Stores metadata rows in the `content_meta` table."""

    def _row(self, document_id, key) -> Optional[ContentMeta]:
        return ContentMeta.query.filter_by(document_id=document_id, meta_key=key).first()

    def get_meta(self, document_id, key):
        try:
            row = self._row(document_id, key)
        except SQLAlchemyError as exc:
            logger.error("Reading %s for document %s failed: %s", key, document_id, exc)
            raise PersistenceError(f"Could not read {key} for document {document_id}") from exc
        return row.meta_value if row else None

    def get_revision(self, document_id, key):
        try:
            row = self._row(document_id, key)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not read {key} for document {document_id}") from exc
        return row.revision if row else 0

    def set_meta(self, document_id, key, value, expected_revision=None):
        current = 0
        try:
            with transactional():
                row = self._row(document_id, key)
                current = row.revision if row else 0

                if expected_revision is not None and expected_revision != current:
                    raise RevisionConflict(expected_revision, current)

                if row is None:
                    row = ContentMeta()
                    row.document_id = document_id
                    row.meta_key = key
                    db.session.add(row)

                row.meta_value = value
                # Always dirty, so an unchanged value still bumps the revision
                row.updated_at = utc_now()
                db.session.flush()
                revision = row.revision
        except StaleDataError as exc:
            # Another writer bumped the row between our read and update
            actual = self.get_revision(document_id, key)
            raise RevisionConflict(
                expected_revision if expected_revision is not None else current,
                actual,
            ) from exc
        except SQLAlchemyError as exc:
            logger.error("Writing %s for document %s failed: %s", key, document_id, exc)
            raise PersistenceError(f"Could not write {key} for document {document_id}") from exc

        return revision

    def delete_meta(self, document_id, key):
        try:
            with transactional():
                ContentMeta.query.filter_by(document_id=document_id, meta_key=key).delete()
        except SQLAlchemyError as exc:
            logger.error("Deleting %s for document %s failed: %s", key, document_id, exc)
            raise PersistenceError(f"Could not delete {key} for document {document_id}") from exc
