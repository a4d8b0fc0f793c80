"""Offline mode services."""

from .offline_detector import OfflineDetector
from .queue_manager import QueueManager
