"""Building blocks of a small shell: lexer, syntax check, expansion, parser, redirections and builtins."""

__version__ = "0.1.0"
__all__ = ["__version__"]