"""Interview session engine and composite evaluation scoring."""

__version__ = "0.1.0"
