from course_builder.domain.tree import Column, Document, Section, Widget
from course_builder.widgets.layout import render_document


def test_empty_document_renders_nothing(registry):
    assert render_document(Document(), registry) == ""


def test_document_markup(sample_document, registry):
    html = render_document(sample_document, registry)

    assert html.startswith('<div class="course-builder-section" id="section_1"')
    assert '<div class="course-builder-container"><div class="course-builder-row">' in html
    assert 'id="col_1" style="width: 50%;"' in html
    assert 'data-widget-type="heading"' in html
    assert "Welcome</h1>" in html
    assert html.index("widget_1") < html.index("widget_2") < html.index("widget_3")


def test_section_settings_become_styles(registry):
    document = Document(sections=[Section(
        id="s",
        settings={"background_color": "#eee", "padding_top": 40, "css_class": "hero"},
        columns=[Column(id="c", width=33.5)],
    )])

    html = render_document(document, registry)

    assert 'class="course-builder-section hero"' in html
    assert "background-color: #eee;padding-top: 40px;" in html
    assert "width: 33.5%;" in html


def test_unknown_widget_types_are_skipped(registry):
    document = Document(sections=[Section(id="s", columns=[Column(id="c", widgets=[
        Widget(id="w1", type="carousel"),
        Widget(id="w2", type="heading", settings={"text": "Shown"}),
    ])])])

    html = render_document(document, registry)

    assert "w1" not in html
    assert "Shown" in html


def test_widget_settings_attribute_is_escaped(registry):
    document = Document(sections=[Section(id="s", columns=[Column(id="c", widgets=[
        Widget(id="w", type="text", settings={"content": '"><script>'}),
    ])])])

    html = render_document(document, registry)

    assert "<script>" not in html
