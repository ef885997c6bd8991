"""
Error taxonomy shared by the services and the HTTP layer.

Every error carries the HTTP status the route boundary answers with and
optional extra fields merged into the JSON body.
"""


class FeedbackError(Exception):
    status_code = 500

    def __init__(self, message, **payload):
        super().__init__(message)
        self.message = message
        self.payload = payload

    def to_dict(self):
        body = {'error': self.message}
        body.update(self.payload)
        return body


class ConfigurationError(FeedbackError):
    """A required environment value is missing."""
    status_code = 500


class NotFoundError(FeedbackError):
    status_code = 404


class NoDataRows(NotFoundError):
    """The configuration table holds a header but no data rows (or nothing at all)."""


class SchemaError(FeedbackError):
    status_code = 400


class MissingColumns(SchemaError):
    def __init__(self, missing, **payload):
        self.missing = list(missing)
        super().__init__(
            f"Required columns not found in sheet: {', '.join(c.title() for c in self.missing)}",
            **payload,
        )


class ValidationError(FeedbackError):
    status_code = 400


class EmptyBatch(ValidationError):
    def __init__(self):
        super().__init__('No feedback data provided')


class TransientStoreError(FeedbackError):
    """Network, auth or quota failure talking to the spreadsheet store."""
    status_code = 500


class TableAlreadyExists(Exception):
    """Raised by a store when a table with the requested name exists already."""

    def __init__(self, name):
        super().__init__(f"A table named '{name}' already exists")
        self.name = name
