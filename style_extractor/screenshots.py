"""Client for the screenshot-capture endpoints."""
from __future__ import annotations

import base64
import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import List, Optional, Sequence
from urllib.parse import urlsplit

import requests

from .schemas import Screenshot

logger = logging.getLogger(__name__)


def _configured_endpoints() -> List[str]:
    raw = os.getenv("SCREENSHOT_API_URLS", "")
    return [endpoint.strip() for endpoint in raw.split(",") if endpoint.strip()]


def _timeout() -> float:
    raw = os.getenv("SCREENSHOT_TIMEOUT", "60")
    try:
        return float(raw)
    except ValueError:
        logger.warning("Invalid SCREENSHOT_TIMEOUT value %s; falling back to 60", raw)
        return 60.0


def is_valid_url(value: str) -> bool:
    try:
        parts = urlsplit(value)
    except ValueError:
        return False
    return parts.scheme in ("http", "https") and bool(parts.netloc)


def screenshot_label(url: str) -> str:
    return f"Full Page: {urlsplit(url).path or '/'}"


def _error_detail(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return ""
    if isinstance(payload, dict) and payload.get("error"):
        return f" - {payload['error']}"
    return ""


def capture_with_endpoint(endpoint: str, url: str, timeout: float) -> Optional[Screenshot]:
    """Ask one endpoint for a screenshot of ``url``; ``None`` on any failure."""

    try:
        response = requests.get(endpoint, params={"url": url}, timeout=timeout)
    except requests.RequestException as exc:
        logger.warning("Screenshot error for %s via %s: %s", url, endpoint, exc)
        return None

    if not response.ok:
        logger.warning(
            "Screenshot failed for %s: %s%s", url, response.status_code, _error_detail(response)
        )
        return None

    content_type = response.headers.get("content-type", "")
    if not content_type.startswith("image/"):
        logger.warning(
            "Screenshot service for %s did not return an image. Content-Type: %s",
            url,
            content_type,
        )
        return None

    encoded = base64.b64encode(response.content).decode("ascii")
    mime = content_type.split(";")[0].strip()
    return Screenshot(url=f"data:{mime};base64,{encoded}", label=screenshot_label(url), source_url=url)


def capture_screenshot(url: str, endpoints: Sequence[str], timeout: float) -> Optional[Screenshot]:
    for endpoint in endpoints:
        shot = capture_with_endpoint(endpoint, url, timeout)
        if shot is not None:
            return shot
    return None


def capture_screenshots(urls: Sequence[str], endpoints: Sequence[str] | None = None) -> List[Screenshot]:
    """Capture every URL in parallel, trying endpoints in order for each.

    Failed captures are dropped, so fewer screenshots than URLs may come back
    and their order is not guaranteed.
    """

    endpoints = list(endpoints) if endpoints is not None else _configured_endpoints()
    targets = [url for url in urls if is_valid_url(url)]
    if not endpoints or not targets:
        if urls and not endpoints:
            logger.info("No screenshot endpoints configured; skipping %d captures", len(urls))
        return []

    start = time.perf_counter()
    timeout = _timeout()
    shots: List[Screenshot] = []
    with ThreadPoolExecutor(max_workers=len(targets)) as executor:
        futures = [executor.submit(capture_screenshot, url, endpoints, timeout) for url in targets]
        for future in as_completed(futures):
            shot = future.result()
            if shot is not None:
                shots.append(shot)

    logger.info(
        "Captured %d/%d screenshots in %.2fs", len(shots), len(targets), time.perf_counter() - start
    )
    return shots
