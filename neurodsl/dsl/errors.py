"""Error types raised by the language pipeline."""

from __future__ import annotations


class DSLError(Exception):
    """Base class for every error the pipeline surfaces to a host."""


class LexError(DSLError):
    """Raised when a source line cannot be tokenized.

    Tokenization is all-or-nothing: no partial token stream survives a
    ``LexError``.
    """

    def __init__(self, message: str, line: int, text: str) -> None:
        self.line = line
        self.text = text
        super().__init__(f"❌ {message} on line {line}: {text}")


class FatalError(DSLError):
    """An error that aborts the whole run instead of degrading."""


class ModelLoadError(FatalError):
    """The model artifact named by ``AI: "..."`` could not be loaded."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"❌ Failed to load model from {path}: {reason}")


class MacroDepthError(FatalError):
    """Macro expansion recursed deeper than the configured limit."""

    def __init__(self, depth: int) -> None:
        self.depth = depth
        super().__init__(f"❌ macro expansion too deep (limit {depth})")
