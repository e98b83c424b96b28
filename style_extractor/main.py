"""FastAPI application entrypoint."""
from __future__ import annotations

import logging
import os
import time
from dataclasses import asdict
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from .db import get_session, init_db
from .discovery import discover_important_pages, normalize_url, page_origin
from .extractor import extract_all_styles
from .logging_setup import configure_logging
from .recent import add_recent_url, filter_suggestions, get_url_suggestions
from .scrape import PageFetchError

LOG_FILE_PATH = configure_logging(os.getenv("LOG_LEVEL"))
logger = logging.getLogger(__name__)

app = FastAPI(title="HTML Style Extractor")

MAX_SAMPLE_URLS = 4


class ExtractRequest(BaseModel):
    url: str
    sample_urls: Optional[List[str]] = None
    discover: bool = True

    @field_validator("sample_urls")
    @classmethod
    def drop_blank_samples(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        if value is None:
            return None
        return [item.strip() for item in value if item and item.strip()]


def validated_url(raw: str) -> str:
    """Normalise ``raw`` or reject it with a 400."""

    url = normalize_url(raw)
    try:
        page_origin(url)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid URL: {raw.strip()!r}") from exc
    return url


def resolve_sample_urls(request: ExtractRequest) -> list[str]:
    """Return the analysis URL first, followed by the other pages to sample."""

    analysis_url = validated_url(request.url)
    if request.sample_urls:
        samples = [analysis_url]
        for url in request.sample_urls:
            normalized = normalize_url(url)
            if normalized not in samples:
                samples.append(normalized)
        return samples[:MAX_SAMPLE_URLS]
    if request.discover:
        return discover_important_pages(analysis_url)
    return [analysis_url]


@app.on_event("startup")
def on_startup() -> None:
    start = time.perf_counter()
    init_db()
    logger.info("Database initialised in %.2fs", time.perf_counter() - start)


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/api/extract")
def extract(payload: ExtractRequest, session: Session = Depends(get_session)) -> dict:
    urls = resolve_sample_urls(payload)
    logger.info("Starting extraction for %s sampling %d pages", urls[0], len(urls))
    try:
        result = extract_all_styles(urls)
    except PageFetchError as exc:
        logger.warning("Extraction failed for %s: %s", urls[0], exc)
        raise HTTPException(status_code=502, detail=f"Extraction failed: {exc}.") from exc
    add_recent_url(session, urls[0])
    return result.to_dict()


@app.get("/api/discover")
def discover(url: str = Query("")) -> dict[str, list[str]]:
    return {"urls": discover_important_pages(validated_url(url))}


@app.get("/api/suggestions")
def suggestions(q: str = "", session: Session = Depends(get_session)) -> list[dict[str, str]]:
    return [asdict(item) for item in filter_suggestions(get_url_suggestions(session), q)]
