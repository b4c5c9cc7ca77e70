"""
Kiosk scanner: read QR codes from a camera and check them in.

    python -m shuttle.scanner --api http://localhost:8000 --token <jwt> --route m1
"""

import argparse
import asyncio
import functools
from contextlib import aclosing

import httpx

from shuttle.core.config import get_settings
from shuttle.core.exceptions import CameraUnavailable
from shuttle.core.logging import setup_logging, get_logger
from shuttle.scanner.camera import QRDecoder, open_camera
from shuttle.scanner.session import ScanSession

logger = get_logger(__name__)


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Scan shuttle QR tickets")
    parser.add_argument("--api", default="http://localhost:8000", help="API base URL")
    parser.add_argument("--token", required=True, help="session token of a driver or admin")
    parser.add_argument("--route", default=None, help="route being boarded (required for drivers)")
    parser.add_argument("--camera", type=int, default=0, help="camera index")
    return parser.parse_args()


async def _run(args: argparse.Namespace) -> None:
    settings = get_settings()
    session = ScanSession(
        functools.partial(open_camera, args.camera),
        QRDecoder(),
        debounce_seconds=settings.SCAN_DEBOUNCE_SECONDS,
    )
    headers = {"Authorization": f"Bearer {args.token}"}

    async with (
        httpx.AsyncClient(base_url=args.api, headers=headers, timeout=10) as client,
        aclosing(session.codes()) as codes,
    ):
        async for code in codes:
            payload = {"code": code}
            if args.route:
                payload["route_id"] = args.route
            try:
                response = await client.post("/api/v1/checkin/scan", json=payload)
                response.raise_for_status()
            except httpx.HTTPError as e:
                logger.error("scan_submit_failed", code=code, error=str(e))
                continue
            result = response.json()
            logger.info("scan_result", code=code, result=result["result"], message=result["message"])


def main() -> None:
    setup_logging()
    args = _parse_args()
    try:
        asyncio.run(_run(args))
    except CameraUnavailable as e:
        logger.error("camera_unavailable", error=str(e))
        raise SystemExit(2)
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
