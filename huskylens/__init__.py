"""Client, frame protocol and result helpers for the HuskyLens AI vision sensor."""

__version__ = "0.1.0"
__all__ = ["protocol", "results", "client", "mindplus"]