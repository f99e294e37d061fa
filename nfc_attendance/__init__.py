"""NFC badge attendance and canteen order tracker."""

__version__ = "1.0.0"
