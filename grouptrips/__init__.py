"""Payment-contingent group trip creation service."""

__version__ = "0.1.0"
