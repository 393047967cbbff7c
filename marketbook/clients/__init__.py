"""Outbound HTTP clients."""
from marketbook.clients.marketplace import MarketplaceClient

__all__ = ["MarketplaceClient"]
