"""
Google Custom Search integration for train pictures.

This module exposes ``search_images()``, which asks the Custom Search
JSON API for image results and returns the ``link`` of each item in
response order. Only the Python standard library is used for the HTTP
request.

Unlike the catalogue lookups, a failed request is not turned into an
empty list: callers need to tell "nothing found" apart from "the
request failed", so transport problems raise ``ImageSearchError``.
"""

from __future__ import annotations

import http.client
import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import Iterable, List, Optional

from ..config import Settings, get_settings

logger = logging.getLogger(__name__)

# Qualifier appended to every train name so results stay on topic
QUERY_QUALIFIER = "thomas tank engine train"

# The Custom Search API serves at most 10 results per request
RESULTS_PER_PAGE = 10

# Fan-wiki image host whose pictures do not load when hotlinked
DENYLISTED_HOSTS = ("static.wikia.nocookie.net",)


class ImageSearchError(Exception):
    """The image search request failed or could not be made."""


def build_query(train_name: str) -> str:
    return f"{train_name} {QUERY_QUALIFIER}"


def start_offset(page: int) -> int:
    """Return the 1-based result offset for a 1-based page number."""
    return (max(1, int(page)) - 1) * RESULTS_PER_PAGE + 1


def is_denylisted(link: str) -> bool:
    lowered = link.lower()
    return any(host in lowered for host in DENYLISTED_HOSTS)


def filter_denylisted(links: Iterable[str]) -> List[str]:
    return [link for link in links if not is_denylisted(link)]


def _http_get_json(url: str, timeout: float) -> dict:
    """Perform an HTTP GET and return the parsed JSON body.

    Raises ``ImageSearchError`` for non-200 responses, network errors and
    bodies that are not a JSON object.
    """
    request = urllib.request.Request(url, headers={"Accept": "application/json"})
    try:
        with urllib.request.urlopen(request, timeout=timeout) as response:
            if response.status != 200:
                logger.warning("Image search returned status %s", response.status)
                raise ImageSearchError(f"API request failed with status {response.status}")
            data = json.loads(response.read().decode("utf-8", errors="ignore"))
    except urllib.error.HTTPError as exc:
        logger.warning("Image search returned status %s", exc.code)
        raise ImageSearchError(f"API request failed with status {exc.code}") from exc
    except urllib.error.URLError as exc:
        logger.error("Error reaching image search: %s", exc.reason)
        raise ImageSearchError(f"Network error: {exc.reason}") from exc
    except (OSError, http.client.HTTPException) as exc:
        # timeouts and dropped connections while reading the body
        logger.error("Error reading image search response: %s", exc)
        raise ImageSearchError(f"Network error: {exc}") from exc
    except ValueError as exc:
        logger.error("Image search returned invalid JSON: %s", exc)
        raise ImageSearchError("Invalid response from image search") from exc
    if not isinstance(data, dict):
        raise ImageSearchError("Invalid response from image search")
    return data


def search_images(query: str, start: int = 1, settings: Optional[Settings] = None) -> List[str]:
    """Search images and return their links.

    Parameters
    ----------
    query : str
        Free-text search query.
    start : int
        1-based index of the first result to return.
    settings : Optional[Settings]
        Credentials and endpoint; defaults to the process settings.

    Returns
    -------
    List[str]
        Image URLs in result order. An empty list means the search
        succeeded but had nothing (more) to return.
    """
    settings = settings or get_settings()
    if not settings.google_api_key or not settings.google_cx:
        raise ImageSearchError("Image search is not configured (GOOGLE_API_KEY / GOOGLE_CX)")

    params = {
        "key": settings.google_api_key,
        "cx": settings.google_cx,
        "q": query,
        "searchType": "image",
        "start": max(1, int(start)),
    }
    url = f"{settings.google_search_api_url}?{urllib.parse.urlencode(params)}"
    logger.debug("Image search q=%r start=%s", query, params["start"])
    data = _http_get_json(url, settings.image_search_timeout)

    items = data.get("items") or []
    links: List[str] = []
    for item in items:
        if isinstance(item, dict) and isinstance(item.get("link"), str):
            links.append(item["link"])
    return links
