"""Exception taxonomy for document parsing, template mapping and storage.

Distinguishes between structural errors (abort the whole call) and value
errors (recoverable, turned into row-level diagnostics by the engine).
"""


class QuoteflowError(Exception):
    """Base class for application errors."""

    pass


class DocumentError(QuoteflowError):
    """Errors raised while turning uploaded bytes into a document."""

    pass


class UnsupportedFormat(DocumentError):
    """The declared or detected document kind is not supported."""

    def __init__(self, kind: object):
        self.kind = kind
        super().__init__(f"Unsupported document format: {kind!r}")


class ParseFailure(DocumentError):
    """The bytes could not be decoded as the claimed format.

    The underlying exception is chained as ``__cause__``.
    """

    pass


class MappingError(QuoteflowError):
    """Structural problems with a template or with how it is applied."""

    pass


class InvalidMappingSpecification(MappingError):
    """The mapping specification is malformed."""

    pass


class IncompatibleTemplate(MappingError):
    """The template expects a different document kind than it was given."""

    def __init__(self, document_kind: str, template_kind: str):
        self.document_kind = document_kind
        self.template_kind = template_kind
        super().__init__(
            f"Template expects a {template_kind} document but got {document_kind}"
        )


class CoercionError(QuoteflowError):
    """A raw value could not be converted to its declared type.

    Examples: "abc" as a number, "not a date" as a date.
    """

    def __init__(self, raw: object, data_type: str):
        self.raw = raw
        self.data_type = data_type
        super().__init__(f"cannot coerce {raw!r} to {data_type}")


class InvalidNumber(CoercionError):
    """Raw value is not a finite base-10 number."""

    def __init__(self, raw: object):
        super().__init__(raw, "number")


class InvalidDate(CoercionError):
    """Raw value is not a recognizable calendar date/time."""

    def __init__(self, raw: object):
        super().__init__(raw, "date")


class NotFoundError(QuoteflowError):
    """A stored entity does not exist."""

    def __init__(self, entity: str, entity_id: object):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")
