class BuilderError(Exception):
    """Base class for every error the builder core raises."""


class ValidationError(BuilderError):
    """Bad input: missing document id, malformed settings, bad reorder payload."""


class InvariantViolation(ValidationError):
    """The tree breaks a structural invariant (duplicate ids, bad widths)."""


class NodeNotFound(ValidationError):
    def __init__(self, kind: str, node_id: str):
        super().__init__(f"{kind} '{node_id}' not found")
        self.kind = kind
        self.node_id = node_id


class UnknownWidgetType(BuilderError):
    def __init__(self, widget_type: str):
        super().__init__(f"Unknown widget type: {widget_type!r}")
        self.widget_type = widget_type


class ParseError(BuilderError):
    """Stored document could not be parsed. Repaired internally, never surfaced."""


class UnsupportedDocumentVersion(BuilderError):
    def __init__(self, version: str):
        super().__init__(f"Unsupported builder document version: {version!r}")
        self.version = version


class Forbidden(BuilderError):
    pass


class PersistenceError(BuilderError):
    """The content store rejected the write or could not be reached. Retryable."""


class RevisionConflict(BuilderError):
    def __init__(self, expected: int, actual: int):
        super().__init__(
            f"Document was modified concurrently (expected revision {expected}, found {actual})"
        )
        self.expected = expected
        self.actual = actual
