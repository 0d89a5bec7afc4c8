"""apimap: discover, index and search HTTP routes in a codebase."""

__version__ = "1.0.0"
