"""
Fatal error kinds raised while converting a header.

Every failure is all-or-nothing: the surfaces (CLI, MCP server) catch
``WranglerError`` and report it instead of emitting partial output.
"""

from typing import Optional


class WranglerError(Exception):
    """Base class for conditions that abort a conversion run."""


class HeaderParseError(WranglerError):
    """The header could not be read or expanded."""


class MalformedDeclarationError(WranglerError):
    """A declaration does not have the shape its handler expects."""

    def __init__(self, message: str, location=None):
        self.location = location
        if location is not None:
            message = f"{location}: {message}"
        super().__init__(message)


class ExtensionIdMismatchError(WranglerError):
    """A header encodes enum values for more than one extension."""

    def __init__(self, header: str, expected: int, found: int, constant: Optional[str] = None):
        self.header = header
        self.expected = expected
        self.found = found
        self.constant = constant
        where = f" (constant {constant})" if constant else ""
        super().__init__(
            f"{header}: extension id {found}{where} disagrees with "
            f"previously decoded extension id {expected}"
        )


class IncompleteExtensionError(WranglerError):
    """No extension name or extension id was established for a header."""
