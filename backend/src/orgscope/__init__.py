"""orgscope - tenant isolation core for a multi-tenant messaging backend."""

__version__ = "0.1.0"
