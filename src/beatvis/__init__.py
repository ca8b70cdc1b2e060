"""Beat-reactive particle visualiser."""

__version__ = "0.1.0"
