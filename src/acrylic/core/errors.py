"""Error types raised by the parsing stages and the HTML backend"""


class AcrylicError(ValueError):
    """Base class for every error reported while compiling a document."""


class ConfigError(AcrylicError):
    """Unusable document header option (e.g. a bad `indent` value)."""


class LexError(AcrylicError):
    """A term could not be lexed; `line`/`column` point at the offending position."""

    def __init__(self, message: str, line: int = 0, column: int = 0):
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column


class LineError(AcrylicError):
    """A source line failed to parse.

    The string form is the full report: message, the line's source text with its
    number, a caret under the failing column, and the terms parsed before it.
    """

    def __init__(self, message: str, line: int, column: int, excerpt: str, terms: list):
        super().__init__(excerpt)
        self.message = message
        self.line = line
        self.column = column
        self.excerpt = excerpt
        self.terms = terms


class TreeError(AcrylicError):
    """Indentation does not describe a valid tree."""

    def __init__(self, message: str, line: int):
        super().__init__(f"line {line}: {message}")
        self.line = line


class ClassifyError(AcrylicError):
    """A node's terms do not form a valid line kind."""


class RenderError(AcrylicError):
    """The HTML backend failed to render a node (e.g. `dot` exited non-zero)."""
