"""Recently analysed URLs and input suggestions."""
from __future__ import annotations

import datetime as dt
import logging
from typing import List, Sequence
from urllib.parse import urlsplit

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from .models import RecentUrl
from .schemas import UrlSuggestion
from .scrape import env_int

logger = logging.getLogger(__name__)

MAX_RECENT_URLS = env_int("MAX_RECENT_URLS", 10, minimum=1)
MAX_SUGGESTIONS = 8

POPULAR_SITES: tuple[UrlSuggestion, ...] = (
    UrlSuggestion("https://stripe.com", "Stripe (Payment)", "popular"),
    UrlSuggestion("https://apple.com", "Apple (Tech)", "popular"),
    UrlSuggestion("https://github.com", "GitHub (Development)", "popular"),
    UrlSuggestion("https://airbnb.com", "Airbnb (Travel)", "popular"),
    UrlSuggestion("https://shopify.com", "Shopify (E-commerce)", "popular"),
    UrlSuggestion("https://notion.so", "Notion (Productivity)", "popular"),
    UrlSuggestion("https://linear.app", "Linear (Project Mgmt)", "tech"),
    UrlSuggestion("https://vercel.com", "Vercel (Hosting)", "tech"),
    UrlSuggestion("https://www.figma.com", "Figma (Design)", "design"),
    UrlSuggestion("https://dribbble.com", "Dribbble (Design)", "design"),
    UrlSuggestion("https://www.intercom.com", "Intercom (Customer Service)", "design"),
    UrlSuggestion("https://www.tailwindcss.com", "Tailwind CSS (Framework)", "design"),
    UrlSuggestion("https://mui.com", "Material-UI (React)", "design"),
    UrlSuggestion("https://chakra-ui.com", "Chakra UI (React)", "design"),
    UrlSuggestion("https://www.mongodb.com", "MongoDB (Database)", "tech"),
    UrlSuggestion("https://www.twilio.com", "Twilio (Communications)", "tech"),
    UrlSuggestion("https://www.cloudflare.com", "Cloudflare (CDN)", "tech"),
    UrlSuggestion("https://www.netlify.com", "Netlify (Hosting)", "tech"),
    UrlSuggestion("https://www.spotify.com", "Spotify (Music)", "popular"),
    UrlSuggestion("https://www.medium.com", "Medium (Blogging)", "popular"),
)


def add_recent_url(session: Session, url: str, now: dt.datetime | None = None) -> None:
    """Move ``url`` to the front of the recent list and trim it to size."""

    used_at = now or dt.datetime.now(dt.timezone.utc)
    record = session.execute(select(RecentUrl).where(RecentUrl.url == url)).scalar_one_or_none()
    if record is None:
        record = RecentUrl(url=url, used_at=used_at)
    else:
        record.used_at = used_at
    session.add(record)
    session.flush()

    keep = (
        select(RecentUrl.id)
        .order_by(RecentUrl.used_at.desc(), RecentUrl.id.desc())
        .limit(MAX_RECENT_URLS)
    )
    result = session.execute(delete(RecentUrl).where(RecentUrl.id.not_in(keep)))
    if result.rowcount:
        logger.debug("Trimmed %d stale recent URLs", result.rowcount)


def list_recent_urls(session: Session) -> List[str]:
    rows = session.execute(
        select(RecentUrl.url)
        .order_by(RecentUrl.used_at.desc(), RecentUrl.id.desc())
        .limit(MAX_RECENT_URLS)
    )
    return list(rows.scalars())


def get_url_suggestions(session: Session) -> List[UrlSuggestion]:
    suggestions = list(POPULAR_SITES)
    for url in list_recent_urls(session):
        hostname = urlsplit(url).hostname
        if hostname:
            suggestions.append(UrlSuggestion(url=url, label=hostname, category="recent"))
    return suggestions


def _match_score(suggestion: UrlSuggestion, query: str) -> int:
    url = suggestion.url.lower()
    label = suggestion.label.lower()
    score = 0
    if query in url:
        score += 3
    if query in label:
        score += 2
    if query in suggestion.category.lower():
        score += 1
    if url == query:
        score += 10
    if label == query:
        score += 8
    if url.startswith(query):
        score += 2
    if label.startswith(query):
        score += 2
    return score


def filter_suggestions(suggestions: Sequence[UrlSuggestion], query: str) -> List[UrlSuggestion]:
    """Rank suggestions against ``query``; an empty query returns the first few."""

    if not query.strip():
        return list(suggestions[:MAX_SUGGESTIONS])

    lowered = query.lower()
    scored = [(suggestion, _match_score(suggestion, lowered)) for suggestion in suggestions]
    scored = [item for item in scored if item[1] > 0]
    scored.sort(key=lambda item: item[1], reverse=True)
    return [suggestion for suggestion, _ in scored[:MAX_SUGGESTIONS]]
