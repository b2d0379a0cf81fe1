"""Application services."""

from app.services.trigger_monitor import TriggerMonitor

__all__ = [
    "TriggerMonitor",
]
