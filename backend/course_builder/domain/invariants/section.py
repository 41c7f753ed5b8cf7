from .column import assert_column, assert_unique_id


def assert_section(section, seen):
    assert_unique_id(section.id, "Section", seen)

    for column in section.columns:
        assert_column(column, seen)
