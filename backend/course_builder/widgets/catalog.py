from __future__ import annotations

from .fields import FieldDescriptor, FieldKind
from .registry import WidgetRegistry, WidgetType
from . import renderers

ALIGN_OPTIONS = (("left", "Left"), ("center", "Center"), ("right", "Right"))
TARGET_OPTIONS = (("_self", "Same window"), ("_blank", "New window"))


def _css_class(description: str | None = None) -> FieldDescriptor:
    return FieldDescriptor(
        "css_class", "CSS class", FieldKind.TEXT, default="", description=description
    )


def _toggle(
    name: str,
    label: str,
    default: bool = True,
    description: str | None = None,
    condition: dict[str, str] | None = None,
) -> FieldDescriptor:
    return FieldDescriptor(
        name,
        label,
        FieldKind.CHECKBOX,
        default=int(default),
        description=description,
        condition=condition or {},
    )


TEXT = WidgetType(
    type="text",
    name="Text",
    description="Formatted text block",
    icon="dashicons-text",
    render=renderers.render_text,
    fields=(
        FieldDescriptor("content", "Content", FieldKind.TEXTAREA, default="",
                        description="Blank lines separate paragraphs."),
        FieldDescriptor("text_align", "Alignment", FieldKind.SELECT, default="left",
                        options=ALIGN_OPTIONS + (("justify", "Justify"),)),
        FieldDescriptor("font_size", "Font size (px)", FieldKind.NUMBER, min=10, max=72,
                        description="Leave empty for the default size."),
        FieldDescriptor("text_color", "Text color", FieldKind.COLOR, default=""),
        _css_class("Additional CSS classes"),
    ),
)

HEADING = WidgetType(
    type="heading",
    name="Heading",
    description="Section heading",
    icon="dashicons-heading",
    render=renderers.render_heading,
    fields=(
        FieldDescriptor("text", "Heading text", FieldKind.TEXT, default="", required=True),
        FieldDescriptor("level", "Level", FieldKind.SELECT, default="h2",
                        options=tuple((h, h.upper()) for h in renderers.HEADING_LEVELS)),
        FieldDescriptor("text_align", "Alignment", FieldKind.SELECT, default="left",
                        options=ALIGN_OPTIONS),
        FieldDescriptor("text_color", "Text color", FieldKind.COLOR, default=""),
        _css_class(),
    ),
)

IMAGE = WidgetType(
    type="image",
    name="Image",
    description="Image from the media library",
    icon="dashicons-format-image",
    render=renderers.render_image,
    fields=(
        FieldDescriptor("image_id", "Image", FieldKind.IMAGE, default="",
                        description="Pick an image from the media library."),
        FieldDescriptor("alt_text", "Alt text", FieldKind.TEXT, default=""),
        FieldDescriptor("link_url", "Link", FieldKind.URL, default="",
                        description="Optional link around the image."),
        FieldDescriptor("link_target", "Open link in", FieldKind.SELECT, default="_self",
                        options=TARGET_OPTIONS),
        FieldDescriptor("image_align", "Alignment", FieldKind.SELECT, default="left",
                        options=ALIGN_OPTIONS),
        FieldDescriptor("image_size", "Size", FieldKind.SELECT, default="full",
                        options=(("thumbnail", "Thumbnail"), ("medium", "Medium"),
                                 ("large", "Large"), ("full", "Full size"))),
        _css_class(),
    ),
)

BUTTON = WidgetType(
    type="button",
    name="Button",
    description="Button with a link",
    icon="dashicons-admin-links",
    render=renderers.render_button,
    fields=(
        FieldDescriptor("text", "Button text", FieldKind.TEXT, default="Click here", required=True),
        FieldDescriptor("link_url", "Link URL", FieldKind.URL, default="#", required=True),
        FieldDescriptor("link_target", "Open link in", FieldKind.SELECT, default="_self",
                        options=TARGET_OPTIONS),
        FieldDescriptor("button_style", "Style", FieldKind.SELECT, default="primary",
                        options=(("primary", "Primary"), ("secondary", "Secondary"),
                                 ("success", "Success"), ("danger", "Danger"),
                                 ("outline", "Outline"))),
        FieldDescriptor("button_size", "Size", FieldKind.SELECT, default="medium",
                        options=(("small", "Small"), ("medium", "Medium"), ("large", "Large"))),
        FieldDescriptor("text_align", "Alignment", FieldKind.SELECT, default="left",
                        options=ALIGN_OPTIONS),
        _css_class(),
    ),
)

COLUMNS = WidgetType(
    type="columns",
    name="Columns",
    description="Split content into columns",
    icon="dashicons-columns",
    render=renderers.render_columns,
    fields=(
        FieldDescriptor("columns_count", "Number of columns", FieldKind.SELECT, default="2",
                        options=tuple((str(n), str(n)) for n in range(1, 5))),
        FieldDescriptor("gap", "Gap between columns", FieldKind.TEXT, default="20px",
                        description="For example 20px or 2rem."),
        _css_class(),
    ),
)

VIDEO = WidgetType(
    type="video",
    name="Video",
    description="YouTube, Vimeo or direct video",
    icon="dashicons-video-alt3",
    render=renderers.render_video,
    fields=(
        FieldDescriptor("input_type", "Source", FieldKind.SELECT, default="url",
                        options=(("url", "Video link"), ("embed", "Embed code"))),
        FieldDescriptor("video_url", "Video URL", FieldKind.URL, default="",
                        description="YouTube, Vimeo or a direct video file URL.",
                        condition={"input_type": "url"}),
        FieldDescriptor("embed_code", "Embed code", FieldKind.TEXTAREA, default="",
                        description="iframe or embed code.",
                        condition={"input_type": "embed"}),
        FieldDescriptor("width", "Width", FieldKind.TEXT, default="100%",
                        description="For example 100% or 800px.",
                        condition={"input_type": "url"}),
        FieldDescriptor("height", "Height (px)", FieldKind.NUMBER, default=500, min=100, max=2000,
                        condition={"input_type": "url"}),
        _toggle("autoplay", "Autoplay", default=False, condition={"input_type": "url"}),
        _toggle("controls", "Show controls", condition={"input_type": "url"}),
        _css_class(),
    ),
)

COURSE_CARD = WidgetType(
    type="course_card",
    name="Course card",
    description="Card for a single course",
    icon="dashicons-welcome-learn-more",
    render=renderers.render_course_card,
    fields=(
        FieldDescriptor("course_id", "Course ID", FieldKind.NUMBER, default=0, min=0,
                        description="0 means the current course."),
        _toggle("show_image", "Show image"),
        _toggle("show_price", "Show price"),
        _toggle("show_rating", "Show rating"),
        _toggle("show_teacher", "Show teacher"),
        _toggle("show_excerpt", "Show excerpt"),
        FieldDescriptor("card_style", "Card style", FieldKind.SELECT, default="default",
                        options=(("default", "Default"), ("compact", "Compact"),
                                 ("detailed", "Detailed"))),
        _css_class(),
    ),
)

COURSE_FILTER = WidgetType(
    type="course_filter",
    name="Course filter",
    description="Filter form for the course archive",
    icon="dashicons-filter",
    render=renderers.render_course_filter,
    fields=(
        _toggle("show_teacher", "Filter by teacher"),
        _toggle("show_level", "Filter by level"),
        _toggle("show_specialization", "Filter by specialization"),
        _toggle("show_topic", "Filter by topic"),
        FieldDescriptor("filter_style", "Filter style", FieldKind.SELECT, default="sidebar",
                        options=(("sidebar", "Sidebar"), ("horizontal", "Horizontal"),
                                 ("dropdown", "Dropdown"))),
        _toggle("ajax_enabled", "Live filtering",
                description="Update results without reloading the page."),
        _css_class(),
    ),
)

COURSE_REGISTER = WidgetType(
    type="course_register",
    name="Registration form",
    description="Course registration form",
    icon="dashicons-id",
    render=renderers.render_course_register,
    fields=(
        FieldDescriptor("form_title", "Form title", FieldKind.TEXT, default="Registration"),
        _toggle("show_title", "Show title"),
        FieldDescriptor("form_style", "Form style", FieldKind.SELECT, default="default",
                        options=(("default", "Default"), ("compact", "Compact"),
                                 ("inline", "Inline"))),
        _css_class(),
    ),
)

TEACHER_INFO = WidgetType(
    type="teacher_info",
    name="Teacher info",
    description="Teacher profile block",
    icon="dashicons-businessperson",
    render=renderers.render_teacher_info,
    fields=(
        FieldDescriptor("teacher_id", "Teacher ID", FieldKind.NUMBER, default=0, min=0,
                        description="0 picks the teacher of the current course."),
        _toggle("show_photo", "Show photo"),
        _toggle("show_name", "Show name"),
        _toggle("show_position", "Show position"),
        _toggle("show_description", "Show description"),
        _toggle("show_specializations", "Show specializations"),
        FieldDescriptor("layout", "Layout", FieldKind.SELECT, default="horizontal",
                        options=(("horizontal", "Horizontal"), ("vertical", "Vertical"))),
        _css_class(),
    ),
)

DEFAULT_WIDGET_TYPES = (
    TEXT,
    HEADING,
    IMAGE,
    BUTTON,
    COLUMNS,
    VIDEO,
    COURSE_CARD,
    COURSE_FILTER,
    COURSE_REGISTER,
    TEACHER_INFO,
)


def build_default_registry() -> WidgetRegistry:
    return WidgetRegistry(list(DEFAULT_WIDGET_TYPES))
