"""Deep-link routing and companion-device sync for the LMS client."""

__version__ = "0.1.0"

__all__ = ["__version__"]
