"""Session services package."""

from haven.services.session.activity_monitor import SessionActivityMonitor

__all__ = ["SessionActivityMonitor"]
