"""Exceptions raised by the document generation pipeline."""


class DocGenError(Exception):
    """Base class for document generation errors."""


class LayoutArgumentError(DocGenError, ValueError):
    """A required block, page or parent reference was missing.

    Indicates a bug in the caller's ordering logic, never bad report data.
    """

    def __init__(self, argument: str, operation: str):
        self.argument = argument
        self.operation = operation
        super().__init__(f"{operation}: '{argument}' is required but was None")


class AssemblyStateError(DocGenError):
    """Raised when an assembler step is invoked out of order."""

    def __init__(self, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Assembler is {actual}, expected {expected}")


class TemplateRenderError(DocGenError):
    """Raised when the report template cannot be rendered from the data."""
