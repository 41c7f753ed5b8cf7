from course_builder.domain.exceptions import InvariantViolation


def assert_unique_id(node_id, kind, seen):
    if not isinstance(node_id, str) or not node_id:
        raise InvariantViolation(f"{kind} is missing an id.")

    if node_id in seen:
        raise InvariantViolation(f"Duplicate id in document: {node_id}")

    seen.add(node_id)


def assert_column_width(column):
    width = column.width

    if isinstance(width, bool) or not isinstance(width, (int, float)):
        raise InvariantViolation(f"Column {column.id} width must be a number.")

    if not 0 < width <= 100:
        raise InvariantViolation(
            f"Column {column.id} width must be within (0, 100], got {width}"
        )


def assert_column(column, seen):
    assert_unique_id(column.id, "Column", seen)
    assert_column_width(column)

    for widget in column.widgets:
        assert_unique_id(widget.id, "Widget", seen)
