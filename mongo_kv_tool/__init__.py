"""Key-value access to MongoDB collections."""

__version__ = "0.1.0"
