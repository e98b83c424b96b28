"""Page and stylesheet fetching through the content proxy."""
from __future__ import annotations

import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import List, Sequence
from urllib.parse import quote, urljoin

import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

logger = logging.getLogger(__name__)

USER_AGENT = os.getenv("FETCH_USER_AGENT", "StyleExtractorBot/1.0")
CORS_PROXY_URL = os.getenv("CORS_PROXY_URL", "https://corsproxy.io/?")


def env_int(name: str, default: int, minimum: int | None = None) -> int:
    """Read an integer setting, falling back to ``default`` when unusable."""

    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid %s value %s; falling back to %s", name, raw, default)
        return default
    if minimum is not None and value < minimum:
        logger.warning("%s must be at least %s; got %s", name, minimum, value)
        return minimum
    return value


REQUEST_TIMEOUT = env_int("FETCH_TIMEOUT", 15, minimum=1)
STYLESHEET_MAX_WORKERS = env_int("STYLESHEET_MAX_WORKERS", 8, minimum=1)


class PageFetchError(RuntimeError):
    """Raised when the page under analysis cannot be fetched."""


@dataclass(slots=True)
class FetchedStylesheet:
    url: str
    content: str


@dataclass(slots=True)
class StylesheetBatch:
    sheets: List[FetchedStylesheet] = field(default_factory=list)
    inaccessible: int = 0


def proxied_url(url: str) -> str:
    if not CORS_PROXY_URL:
        return url
    return f"{CORS_PROXY_URL}{quote(url, safe='')}"


def _fetch_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
    )


@_fetch_retry()
def _get(url: str) -> requests.Response:
    return requests.get(
        proxied_url(url),
        headers={"User-Agent": USER_AGENT},
        timeout=REQUEST_TIMEOUT,
        allow_redirects=True,
    )


def fetch_page(url: str) -> tuple[str, str]:
    """Fetch the page under analysis, raising ``PageFetchError`` on any failure."""

    start = time.perf_counter()
    try:
        response = _get(url)
    except requests.RequestException as exc:
        logger.warning("Failed to fetch %s: %s", url, exc)
        raise PageFetchError(f"Failed to fetch URL: {exc}") from exc

    if not response.ok:
        logger.info("Fetching %s returned status %s", url, response.status_code)
        raise PageFetchError(
            f"Failed to fetch URL: {response.reason} (status: {response.status_code})"
        )

    logger.info("Fetched %s in %.2fs", url, time.perf_counter() - start)
    return url, response.text


def _fetch_stylesheet(url: str) -> str:
    response = _get(url)
    response.raise_for_status()
    return response.text


def fetch_stylesheets(hrefs: Sequence[str], base_url: str) -> StylesheetBatch:
    """Fetch every stylesheet concurrently; failures are counted, never raised.

    Successful sheets are returned in document order so that concatenating
    them preserves the cascade order of the page.
    """

    batch = StylesheetBatch()
    urls: List[str] = []
    for href in hrefs:
        try:
            urls.append(urljoin(base_url, href))
        except ValueError:
            logger.debug("Skipping unresolvable stylesheet href %s", href)
            batch.inaccessible += 1
    if not urls:
        return batch

    start = time.perf_counter()
    results: dict[int, FetchedStylesheet] = {}
    max_workers = min(STYLESHEET_MAX_WORKERS, len(urls))
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_to_index = {
            executor.submit(_fetch_stylesheet, url): index for index, url in enumerate(urls)
        }
        for future in as_completed(future_to_index):
            index = future_to_index[future]
            try:
                results[index] = FetchedStylesheet(url=urls[index], content=future.result())
            except requests.RequestException as exc:
                logger.warning("Stylesheet %s is inaccessible: %s", urls[index], exc)
                batch.inaccessible += 1

    batch.sheets = [results[index] for index in sorted(results)]
    logger.info(
        "Fetched %d/%d stylesheets in %.2fs",
        len(batch.sheets),
        len(urls),
        time.perf_counter() - start,
    )
    return batch
