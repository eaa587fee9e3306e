"""Planet Nine Classes learning-management API."""

__version__ = "0.1.0"
