"""
Control Panel Client
====================

Serialized action requests and notification bookkeeping for the control panel.
"""

from .action_queue import ActionClient, ActionQueue, ActionRequestError
from .control_panel import ControlPanel
from .notifications import NotificationCenter

__all__ = [
    "ActionClient",
    "ActionQueue",
    "ActionRequestError",
    "ControlPanel",
    "NotificationCenter",
]
