"""Contact pipeline exceptions."""


class SubmissionValidationError(Exception):
    """Raised when a submission is missing required top-level fields."""

    def __init__(self, missing_fields: tuple[str, ...]):
        self.missing_fields = missing_fields
        super().__init__(f"missing required fields: {', '.join(missing_fields)}")


class LookupFailedError(Exception):
    """Raised inside an IP lookup. Never escapes the resolver that raised it."""

    pass


class DispatchError(Exception):
    """Raised when the notification could not be delivered to Telegram."""

    pass
