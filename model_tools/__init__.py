"""Tools for generating Go model structs from relational database schemas."""

__version__ = "0.1.0"
