"""Role-aware academic records service for a music school."""

__version__ = "0.1.0"
