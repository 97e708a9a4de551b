"""Court reservation backend for a tennis club."""

__version__ = "0.1.0"
