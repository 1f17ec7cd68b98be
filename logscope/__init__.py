"""logscope - live classification and filtering of cluster logs and events."""

__version__ = "0.1.0"
