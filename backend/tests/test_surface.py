import pytest

from course_builder.domain.exceptions import ValidationError
from course_builder.domain.surface import (
    WIDGET_ID_ATTR,
    WIDGET_SETTINGS_ATTR,
    SettingsCache,
    SurfaceNode,
    build_surface,
    extract_from_surface,
    resolve_width,
)
from course_builder.domain.tree import Document


def _widget(widget_id=None, widget_type="text", settings=None):
    attrs = {"data-widget-type": widget_type} if widget_type else {}
    if widget_id:
        attrs[WIDGET_ID_ATTR] = widget_id
    if settings is not None:
        attrs[WIDGET_SETTINGS_ATTR] = settings
    return SurfaceNode(role="widget", attrs=attrs)


def _surface(*widgets, width="100%", parent_width=None, section_id="s1", column_id="c1"):
    column = SurfaceNode(
        role="column",
        attrs={"data-column-id": column_id} if column_id else {},
        width=width,
        parent_width=parent_width,
        children=[SurfaceNode(children=list(widgets))],
    )
    section = SurfaceNode(
        role="section",
        attrs={"data-section-id": section_id} if section_id else {},
        children=[SurfaceNode(children=[column])],
    )
    return SurfaceNode(role="editor", children=[section])


def test_build_then_extract_is_identity(sample_document):
    cache = SettingsCache()
    assert extract_from_surface(build_surface(sample_document, cache), cache) == sample_document


def test_extract_with_a_cold_cache_reads_settings_attributes(sample_document):
    surface = build_surface(sample_document, SettingsCache())
    assert extract_from_surface(surface, SettingsCache()) == sample_document


def test_empty_surface_gives_empty_document():
    assert extract_from_surface(SurfaceNode(role="editor"), SettingsCache()) == Document()


def test_missing_ids_are_minted_and_written_back():
    widget = _widget()
    surface = _surface(widget, section_id=None, column_id=None)

    document = extract_from_surface(surface, SettingsCache())

    section = document.sections[0]
    assert section.id.startswith("section_")
    assert section.columns[0].id.startswith("col_")
    minted = section.columns[0].widgets[0].id
    assert minted.startswith("widget_")
    assert widget.attrs[WIDGET_ID_ATTR] == minted


def test_widgets_without_type_are_skipped():
    surface = _surface(_widget("w1", widget_type=None), _widget("w2"))

    document = extract_from_surface(surface, SettingsCache())

    assert [w.id for w in document.sections[0].columns[0].widgets] == ["w2"]


def test_cached_settings_win_over_the_attribute():
    cache = SettingsCache()
    cache.put("w1", {"content": "edited"})
    surface = _surface(_widget("w1", settings='{"content": "stale"}'))

    document = extract_from_surface(surface, cache)

    assert document.sections[0].columns[0].widgets[0].settings == {"content": "edited"}


def test_html_escaped_settings_attribute_is_parsed_once():
    cache = SettingsCache()
    node = _widget("w1", settings="{&quot;content&quot;: &quot;Hi&quot;}")

    extract_from_surface(_surface(node), cache)
    node.attrs[WIDGET_SETTINGS_ATTR] = "{}"
    document = extract_from_surface(_surface(node), cache)

    assert "w1" in cache
    assert document.sections[0].columns[0].widgets[0].settings == {"content": "Hi"}


def test_unparseable_settings_attribute_gives_empty_settings():
    document = extract_from_surface(_surface(_widget("w1", settings="{broken")), SettingsCache())
    assert document.sections[0].columns[0].widgets[0].settings == {}


@pytest.mark.parametrize("width, parent, expected", [
    ("50%", None, 50.0),
    ("33.5%", 900, 33.5),
    ("300px", 600, 50.0),
    ("300px", 0, 100.0),
    ("300px", None, 100.0),
    ("auto", 600, 100.0),
    (None, 600, 100.0),
    ("0%", None, 100.0),
    ("900px", 600, 100.0),
])
def test_resolve_width(width, parent, expected):
    assert resolve_width(width, parent) == expected


def test_surface_from_dict():
    surface = SurfaceNode.from_dict({
        "role": "editor",
        "children": [{
            "role": "section",
            "attrs": {"data-section-id": "s1"},
            "children": [{
                "role": "column",
                "attrs": {"data-column-id": "c1"},
                "width": "25%",
                "children": [{
                    "role": "widget",
                    "attrs": {"data-widget-id": "w1", "data-widget-type": "heading",
                              "data-widget-settings": '{"text": "Hi"}'},
                }],
            }],
        }],
    })

    document = extract_from_surface(surface, SettingsCache())

    column = document.sections[0].columns[0]
    assert column.width == 25.0
    assert column.widgets[0].settings == {"text": "Hi"}


def test_cleared_settings_in_the_cache_are_not_refilled_from_the_attribute():
    cache = SettingsCache()
    cache.put("w1", {})
    surface = _surface(_widget("w1", settings='{"content": "stale"}'))

    document = extract_from_surface(surface, cache)

    assert document.sections[0].columns[0].widgets[0].settings == {}


@pytest.mark.parametrize("data", [
    "section",
    {"role": "editor", "children": "abc"},
    {"role": "editor", "attrs": ["x"]},
    {"role": "editor", "children": [1]},
    {"role": "editor", "children": [{"role": "section", "children": [{"attrs": "x"}]}]},
])
def test_malformed_surface_is_a_validation_error(data):
    with pytest.raises(ValidationError):
        SurfaceNode.from_dict(data)
