"""Exceptions raised by the URL shortener core.

Classes:
    ShortenerError:
        Generic base class for shortener exceptions.

    ValidationError:
        Raised when a required input (``link`` / ``links``) is missing or malformed.
        Nothing has been written when it is raised.

    StoreError:
        Raised when the record store fails (connectivity, authentication,
        rejected filter, SQL error, ...). The original exception is chained.

Example:
    >>> from ttl_shortener.exceptions import ValidationError
    >>> raise ValidationError("Link is required.")
    Traceback (most recent call last):
        ...
    ttl_shortener.exceptions.ValidationError: Link is required.
"""


class ShortenerError(Exception):
    """Generic base class for shortener exceptions."""

    pass


class ValidationError(ShortenerError):
    """Exception raised when request input is missing or malformed."""

    pass


class StoreError(ShortenerError):
    """Exception raised when the record store cannot complete an operation."""

    pass
