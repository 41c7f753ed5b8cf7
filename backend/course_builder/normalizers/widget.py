from course_builder.domain.tree import Widget


def normalize_widget(widget: Widget):
    return {
        "id": widget.id,
        "type": widget.type,
        "settings": dict(widget.settings),
    }
