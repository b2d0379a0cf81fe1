"""Service layer: settings, exchange clients, trigger monitor and API."""
