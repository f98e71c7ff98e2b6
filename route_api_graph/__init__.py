"""Route API Graph - static map of routes, components and the API calls they make."""

__version__ = "0.1.0"

__all__ = ["__version__"]
