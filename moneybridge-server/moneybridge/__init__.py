"""MoneyBridge peer-to-peer wallet and mobile-money request server."""

__version__ = "0.4.0"
