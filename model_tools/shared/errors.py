"""Custom exceptions for model tools."""

from __future__ import annotations


class CodegenError(Exception):
    """Base exception for code generation errors."""

    def __init__(self, message: str, context: str | None = None) -> None:
        self.context = context
        full_message = f"{message}" if not context else f"[{context}] {message}"
        super().__init__(full_message)


class CatalogError(CodegenError):
    """Raised when the schema catalog cannot be read."""


class NamingError(CodegenError):
    """Raised when an identifier cannot be turned into a type or field name."""

    def __init__(self, identifier: str, context: str | None = None) -> None:
        self.identifier = identifier
        super().__init__(
            f"Identifier {identifier!r} has no name segments", context
        )


class RenderError(CodegenError):
    """Raised when a template fails to parse or execute.

    ``partial`` holds whatever output was produced before the failure.
    """

    def __init__(
        self,
        message: str,
        context: str | None = None,
        partial: str = "",
    ) -> None:
        self.partial = partial
        super().__init__(message, context)
