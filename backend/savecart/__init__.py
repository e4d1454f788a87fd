"""SaveCart: product detection and price tracking for e-commerce pages."""

__version__ = "1.0.0"
