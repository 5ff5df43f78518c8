"""smartshift - weekly automatic shift assignment for a store."""

__version__ = "0.1.0"
