from .section import assert_section


def assert_document(document):
    """
    Structural checks run before every save. Sibling column widths are
    not required to sum to 100.
    """
    seen = set()

    for section in document.sections:
        assert_section(section, seen)
