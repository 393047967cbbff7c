"""
marketbook config: load from env.

load_postgres_config(), load_booking_config(), load_marketplace_config().
"""
from marketbook.config.booking import BookingConfig, load_booking_config
from marketbook.config.marketplace import MarketplaceClientConfig, load_marketplace_config
from marketbook.config.postgres import PostgresConfig, load_postgres_config

__all__ = [
    "BookingConfig",
    "load_booking_config",
    "MarketplaceClientConfig",
    "load_marketplace_config",
    "PostgresConfig",
    "load_postgres_config",
]
