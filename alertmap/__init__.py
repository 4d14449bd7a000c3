"""Community hazard-alert map backend."""

__version__ = "0.1.0"
