"""storefront - cart, session and order history stores with simulated checkout."""

__version__ = "0.1.0"
