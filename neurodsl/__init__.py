"""neurodsl: an indentation-sensitive scripting language with classifier-backed
branching and natural-language macros."""

__version__ = "0.4.0"
