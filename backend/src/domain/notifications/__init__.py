"""Notifications domain module - message shape, gateway port, templates"""

from .ports import NotificationMessage, NotificationPort, RecordingNotifier
from . import templates

__all__ = [
    "NotificationMessage",
    "NotificationPort",
    "RecordingNotifier",
    "templates",
]
