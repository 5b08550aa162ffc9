"""Invoice record-keeping service."""

__version__ = "0.1.0"
