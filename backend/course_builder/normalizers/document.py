from typing import Any, Dict

from course_builder.domain.tree import Document
from .section import normalize_section


def normalize_document(document: Document, registry=None) -> Dict[str, Any]:
    return {
        "version": document.version,
        "sections": [normalize_section(s, registry) for s in document.sections],
    }
