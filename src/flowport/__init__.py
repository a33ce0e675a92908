"""flowport - archive export and reconciliation for workspace data."""

__version__ = "1.0.0"
