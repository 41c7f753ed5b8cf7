from course_builder.domain.tree import Section
from .column import normalize_column


def normalize_section(section: Section, registry=None):
    return {
        "id": section.id,
        "settings": dict(section.settings),
        "columns": [normalize_column(c, registry) for c in section.columns],
    }
