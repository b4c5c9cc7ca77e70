"""
OpenCV camera frame source and QR decoder.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import cv2

from shuttle.core.exceptions import CameraUnavailable
from shuttle.core.logging import get_logger

logger = get_logger(__name__)


class CameraSource:
    def __init__(self, capture: "cv2.VideoCapture"):
        self._capture = capture

    async def read(self):
        ok, frame = await asyncio.to_thread(self._capture.read)
        return frame if ok else None


@asynccontextmanager
async def open_camera(index: int = 0) -> AsyncIterator[CameraSource]:
    """Open camera `index`; the device is released on every exit path."""
    capture = await asyncio.to_thread(cv2.VideoCapture, index)
    try:
        if not capture.isOpened():
            raise CameraUnavailable(f"Camera {index} could not be opened; check camera permissions")
        logger.info("camera_opened", index=index)
        yield CameraSource(capture)
    finally:
        capture.release()
        logger.info("camera_released", index=index)


class QRDecoder:
    def __init__(self):
        self._detector = cv2.QRCodeDetector()

    def __call__(self, frame) -> Optional[str]:
        data, _points, _ = self._detector.detectAndDecode(frame)
        return data or None
