"""orgtree — classify positions into custom-field hierarchies."""

__version__ = "0.4.0"
