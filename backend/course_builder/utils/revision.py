from flask import request
from course_builder.domain.exceptions import ValidationError


def expected_revision_from_request(header="If-Match"):
    """
    Read the revision the client last saw from `If-Match`.

    Accepts `3`, `"3"` and `W/"3"`. Returns None when the header is absent,
    which keeps last-write-wins.
    """
    raw = request.headers.get(header)
    if raw is None or raw.strip() in ("", "*"):
        return None

    value = raw.strip()
    if value.startswith("W/"):
        value = value[2:]
    value = value.strip('"')

    try:
        revision = int(value)
    except ValueError:
        raise ValidationError(f"Invalid {header} header: {raw!r}")

    if revision < 0:
        raise ValidationError(f"Invalid {header} header: {raw!r}")

    return revision


def revision_etag(revision):
    return f'"{revision}"'
