"""Sheet and bar nesting for fabrication shops."""

__version__ = "1.0.0"
