from neurodsl.dsl.errors import DSLError, FatalError, LexError, MacroDepthError, ModelLoadError
from neurodsl.dsl.lexer import tokenize
from neurodsl.dsl.parser import parse

__all__ = ["DSLError", "FatalError", "LexError", "MacroDepthError", "ModelLoadError", "tokenize", "parse"]
