"""Edge-list graph format conversion."""

__version__ = "0.1.0"

__all__ = ["__version__"]
