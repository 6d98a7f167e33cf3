"""Class decorators for packed bitfields, builders, custom debug output and sortedness checks."""

__version__ = "0.1.0"

__all__ = ["bitfield", "builder", "debug", "field_data", "sorted", "specifiers"]