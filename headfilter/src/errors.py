"""Exception taxonomy for reference filtering.

Configuration problems are reported when a filter is built or saved.
Matching itself never raises: a well-formed reference checked against a
successfully built rule always yields a boolean.
"""

from __future__ import annotations


class HeadFilterError(Exception):
    """Base class for all reference-filtering errors."""


class ConfigurationError(HeadFilterError):
    """Raised when a filter configuration is malformed."""


class InvalidPatternError(ConfigurationError):
    """Raised when a raw regular expression cannot be compiled.

    Attributes:
        pattern: The rejected expression.
        detail: The regex engine's diagnostic message.
    """

    def __init__(self, pattern: str, detail: str) -> None:
        self.pattern = pattern
        self.detail = detail
        super().__init__(f"Invalid regular expression {pattern!r}: {detail}")


class InvalidCategoryError(HeadFilterError):
    """Raised when data is requested for a category a reference does not have.

    Signals a programming error inside the filter engine; external input
    can never trigger it.
    """
