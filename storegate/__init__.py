"""storegate: client-side authorization evaluation for the retail back office."""

__version__ = "0.1.0"
