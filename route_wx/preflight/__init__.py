"""
Preflight change-detection monitoring.

Provides:
- PreflightSession: Caller owned monitoring state for one station
- PreflightMonitor: Start, poll and stop sessions
- MonitorTask: Background timer polling one session
- Notifier / LoggingNotifier: Notification delivery
- SessionStore: Session persistence in a key-value store
"""

from route_wx.preflight.session import PreflightSession, SESSION_TIMEOUT
from route_wx.preflight.notifications import LoggingNotifier, Notifier, RecordingNotifier
from route_wx.preflight.monitor import MonitorTask, PreflightMonitor
from route_wx.preflight.store import SessionStore

__all__ = [
    'PreflightSession',
    'SESSION_TIMEOUT',
    'Notifier',
    'LoggingNotifier',
    'RecordingNotifier',
    'PreflightMonitor',
    'MonitorTask',
    'SessionStore',
]
