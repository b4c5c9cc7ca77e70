"""
Driver-side QR scanning: a cancellable scan session over a frame source.
The OpenCV camera lives in `shuttle.scanner.camera` and is imported only by
callers that actually open a device.
"""

from shuttle.scanner.debounce import ScanDebouncer
from shuttle.scanner.session import ScanSession

__all__ = ["ScanDebouncer", "ScanSession"]
