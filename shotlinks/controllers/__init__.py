# Controllers package
from .scan_service import ScanService, ScanSummary
from .watch_service import WatchService, parse_screenshot_event

__all__ = [
    'ScanService',
    'ScanSummary',
    'WatchService',
    'parse_screenshot_event',
]
