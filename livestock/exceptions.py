"""
Exceptions raised by the fact log and the services built on it.

Absence of data is never an error: resolvers return None and aggregations
return zero. These exceptions cover the cases that must fail loudly.
"""


class FactStoreError(Exception):
    """Base class for fact log errors."""
    pass


class UnknownTagError(FactStoreError, KeyError):
    """Raised when a tag has no entry in the tag table."""
    pass


class UnknownQuestionError(FactStoreError):
    """Raised when an answer batch references a question that does not exist."""
    pass


class MalformedPayloadError(FactStoreError, ValueError):
    """Raised when a fact value cannot be decoded into its payload shape."""
    pass


class InvalidWindowError(FactStoreError, ValueError):
    """Raised when a date window starts after it ends."""
    pass


class ShapeMismatchError(FactStoreError, ValueError):
    """Raised when tags are measured in a way their payload shape does not allow."""
    pass
