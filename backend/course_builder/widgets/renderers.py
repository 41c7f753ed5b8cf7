"""
Per-type widget renderers.

Each renderer receives settings already merged with the type's defaults
and returns markup. Every value coming from settings is escaped here.
Widgets that show course, program or teacher data render a container
carrying their settings as data attributes; the content itself is filled
in by the frontend from the content API.
"""
from __future__ import annotations

import re
from typing import Any, Mapping
from urllib.parse import urlencode

from markupsafe import Markup, escape

HEADING_LEVELS = ("h1", "h2", "h3", "h4", "h5", "h6")
SAFE_URL = re.compile(r"^(?:https?://|mailto:|/|#|\?)", re.IGNORECASE)
YOUTUBE_ID = re.compile(
    r"(?:youtube\.com/(?:watch\?(?:.*&)?v=|embed/|v/)|youtu\.be/)([^\"&?/\s]{11})"
)
VIMEO_ID = re.compile(r"vimeo\.com/(\d+)")
FIRST_URL = re.compile(r"https?://[^\s<>\"']+")


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "on", "yes"}
    return bool(value)


def _safe_url(url: Any) -> str:
    url = str(url or "").strip()
    if not url or not SAFE_URL.match(url):
        return ""
    return url


def _classes(base: str, extra: Any) -> str:
    extra = str(extra or "").strip()
    return f"{base} {extra}" if extra else base


def _tag(name: str, attrs: Mapping[str, Any], inner: Any = "") -> Markup:
    rendered = "".join(
        f' {key}="{escape(value)}"'
        for key, value in attrs.items()
        if value not in (None, "")
    )
    return Markup(f"<{name}{rendered}>{escape(inner)}</{name}>")


def _style(**rules: Any) -> str:
    return "".join(
        f"{prop.replace('_', '-')}: {value};" for prop, value in rules.items() if value not in (None, "")
    )


def _data_attrs(settings: Mapping[str, Any], keys: tuple[str, ...]) -> dict[str, Any]:
    attrs: dict[str, Any] = {}
    for key in keys:
        value = settings.get(key)
        if isinstance(value, bool):
            value = int(value)
        attrs[f"data-{key.replace('_', '-')}"] = value
    return attrs


def render_text(settings: Mapping[str, Any]) -> str:
    content = str(settings.get("content") or "")
    if not content.strip():
        return ""

    font_size = settings.get("font_size")
    paragraphs = [p.strip() for p in re.split(r"\n\s*\n", content) if p.strip()]
    inner = Markup("").join(
        Markup("<p>") + Markup("<br>").join(escape(line) for line in p.splitlines()) + Markup("</p>")
        for p in paragraphs
    )

    return str(_tag(
        "div",
        {
            "class": _classes("course-builder-text", settings.get("css_class")),
            "style": _style(
                text_align=settings.get("text_align"),
                font_size=f"{font_size}px" if font_size not in (None, "") else None,
                color=settings.get("text_color"),
            ),
        },
        inner,
    ))


def render_heading(settings: Mapping[str, Any]) -> str:
    text = str(settings.get("text") or "")
    if not text:
        return ""

    level = settings.get("level")
    if level not in HEADING_LEVELS:
        level = "h2"

    return str(_tag(
        level,
        {
            "class": _classes("course-builder-heading", settings.get("css_class")),
            "style": _style(
                text_align=settings.get("text_align"),
                color=settings.get("text_color"),
            ),
        },
        text,
    ))


def render_button(settings: Mapping[str, Any]) -> str:
    style = settings.get("button_style") or "primary"
    size = settings.get("button_size") or "medium"

    link = _tag(
        "a",
        {
            "href": _safe_url(settings.get("link_url")) or "#",
            "target": settings.get("link_target") or "_self",
            "class": _classes(
                f"course-builder-button course-builder-button-{style} course-builder-button-{size}",
                settings.get("css_class"),
            ),
        },
        settings.get("text") or "",
    )
    return str(_tag(
        "div",
        {
            "class": "course-builder-button-wrapper",
            "style": _style(text_align=settings.get("text_align")),
        },
        link,
    ))


def render_image(settings: Mapping[str, Any]) -> str:
    # image_id holds either a media URL or an attachment reference resolved by the frontend
    source = str(settings.get("image_id") or "").strip()
    url = _safe_url(source)
    if not url:
        return ""

    img = Markup(
        f'<img src="{escape(url)}" alt="{escape(settings.get("alt_text") or "")}" '
        f'class="course-builder-image-img">'
    )
    link_url = _safe_url(settings.get("link_url"))
    if link_url:
        img = _tag("a", {"href": link_url, "target": settings.get("link_target") or "_self"}, img)

    return str(_tag(
        "div",
        {
            "class": _classes("course-builder-image", settings.get("css_class")),
            "style": _style(text_align=settings.get("image_align")),
        },
        img,
    ))


def _video_iframe(src: str, width: Any, height: Any, wrapper_class: str) -> Markup:
    iframe = Markup(
        f'<iframe width="{escape(width)}" height="{escape(height)}" src="{escape(src)}" '
        f'frameborder="0" allow="autoplay; fullscreen; picture-in-picture" allowfullscreen></iframe>'
    )
    return _tag("div", {"class": f"course-builder-video-wrapper {wrapper_class}".strip()}, iframe)


def render_video(settings: Mapping[str, Any]) -> str:
    width = settings.get("width") or "100%"
    height = settings.get("height") or 500
    autoplay = _flag(settings.get("autoplay"))
    controls = _flag(settings.get("controls"))

    if settings.get("input_type") == "embed":
        # Embed code is never echoed; only its first URL is trusted
        match = FIRST_URL.search(str(settings.get("embed_code") or ""))
        if not match:
            return ""
        body = _video_iframe(match.group(0), "100%", 500, "course-builder-embed-wrapper")
    else:
        url = _safe_url(settings.get("video_url"))
        if not url:
            return ""

        params = []
        if autoplay:
            params.append(("autoplay", 1))
        if not controls:
            params.append(("controls", 0))

        youtube = YOUTUBE_ID.search(url)
        vimeo = VIMEO_ID.search(url)
        if youtube:
            params += [("rel", 0), ("modestbranding", 1)]
            src = f"https://www.youtube.com/embed/{youtube.group(1)}?{urlencode(params)}"
            body = _video_iframe(src, width, height, "course-builder-youtube")
        elif vimeo:
            src = f"https://player.vimeo.com/video/{vimeo.group(1)}"
            if params:
                src += f"?{urlencode(params)}"
            body = _video_iframe(src, width, height, "")
        else:
            flags = " ".join(f for f, on in (("autoplay", autoplay), ("controls", controls)) if on)
            body = Markup(
                f'<div class="course-builder-video-wrapper"><video width="{escape(width)}" '
                f'height="{escape(height)}" {flags}><source src="{escape(url)}" type="video/mp4">'
                f"</video></div>"
            )

    return str(_tag("div", {"class": _classes("course-builder-video", settings.get("css_class"))}, body))


def render_columns(settings: Mapping[str, Any]) -> str:
    # Layout helper for the editor; columns are rendered at the section level
    return ""


def render_course_card(settings: Mapping[str, Any]) -> str:
    style = settings.get("card_style") or "default"
    attrs = {
        "class": _classes(
            f"course-builder-course-card course-builder-course-card-{style}",
            settings.get("css_class"),
        ),
        **_data_attrs(
            settings,
            ("course_id", "show_image", "show_price", "show_rating", "show_teacher", "show_excerpt"),
        ),
    }
    return str(_tag("div", attrs))


def render_course_filter(settings: Mapping[str, Any]) -> str:
    style = settings.get("filter_style") or "sidebar"
    attrs = {
        "class": _classes(
            f"course-builder-course-filter course-builder-course-filter-{style}",
            settings.get("css_class"),
        ),
        **_data_attrs(
            settings,
            ("show_teacher", "show_level", "show_specialization", "show_topic", "ajax_enabled"),
        ),
    }
    return str(_tag("form", {**attrs, "method": "get"}))


def render_course_register(settings: Mapping[str, Any]) -> str:
    style = settings.get("form_style") or "default"
    title = settings.get("form_title") or ""

    inner = Markup("")
    if _flag(settings.get("show_title")) and title:
        inner = _tag("h3", {"class": "course-register-title"}, title)

    return str(_tag(
        "div",
        {
            "class": _classes(
                f"course-builder-course-register course-builder-course-register-{style}",
                settings.get("css_class"),
            ),
        },
        inner,
    ))


def render_teacher_info(settings: Mapping[str, Any]) -> str:
    layout = settings.get("layout") or "horizontal"
    attrs = {
        "class": _classes(
            f"course-builder-teacher-info course-builder-teacher-info-{layout}",
            settings.get("css_class"),
        ),
        **_data_attrs(
            settings,
            (
                "teacher_id",
                "show_photo",
                "show_name",
                "show_position",
                "show_description",
                "show_specializations",
            ),
        ),
    }
    return str(_tag("div", attrs))
