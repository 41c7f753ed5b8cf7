from course_builder.extensions import db
from .base import BaseModel


class ContentMeta(BaseModel):
    """
    One metadata value attached to a host document (a course or page),
    stored as text. `revision` is bumped by the mapper on every update
    and guards against lost updates.
    """
    __tablename__ = "content_meta"

    __table_args__ = (
        db.UniqueConstraint("document_id", "meta_key", name="uq_content_meta_document_key"),
    )

    document_id = db.Column(db.String(64), nullable=False, index=True)
    meta_key = db.Column(db.String(64), nullable=False)
    meta_value = db.Column(db.Text, nullable=False, default="")
    revision = db.Column(db.Integer, nullable=False)

    __mapper_args__ = {"version_id_col": revision}
