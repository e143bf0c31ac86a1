"""
Enrichment Service - best-effort GIF lookup for registration descriptions.

A free-text description ("grandma's famous potato salad, vegan") is first
normalized into a short search term by an OpenAI chat completion, then used
to search Giphy. Both steps degrade gracefully:

- normalize_description() returns the original text on any failure
- search_gifs() returns an empty list on any failure; search_gif() returns
  None on any failure or empty result

so find_gif_for_description() never raises and never blocks a save.
"""

import logging
from typing import List, Optional

import requests
from openai import OpenAI

from potluck.services.logging_utils import get_service_logger, log_operation
from potluck.utils.config import get_config
from potluck.utils.constants import (
    EXTRACTION_SYSTEM_PROMPT,
    GIPHY_LANG,
    GIPHY_PICKER_LIMIT,
    GIPHY_RATING,
    GIPHY_SEARCH_URL,
    OPENAI_MAX_TOKENS,
    OPENAI_TEMPERATURE,
)

logger = get_service_logger(__name__)

_client: Optional[OpenAI] = None


def _get_openai_client() -> Optional[OpenAI]:
    """Lazily build the OpenAI client; None when no API key is configured."""
    global _client

    api_key = get_config().openai_api_key
    if not api_key:
        return None
    if _client is None:
        _client = OpenAI(api_key=api_key, timeout=get_config().http_timeout)
    return _client


def reset_client() -> None:
    """Forget the cached OpenAI client (after a config change)."""
    global _client
    _client = None


def normalize_description(description: str) -> str:
    """
    Extract the main potluck item from a free-text description.

    Args:
        description: What the guest wrote

    Returns:
        Short searchable term (e.g. "potato salad"), or ``description``
        unchanged when the API key is missing, the call fails or the model
        returns nothing
    """
    client = _get_openai_client()
    if client is None:
        logger.warning("OpenAI API key not found, using original description")
        return description

    try:
        response = client.chat.completions.create(
            model=get_config().openai_model,
            messages=[
                {"role": "system", "content": EXTRACTION_SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": (
                        "Extract the main food, drink, or other potluck item "
                        f'from this description: "{description}"'
                    ),
                },
            ],
            max_tokens=OPENAI_MAX_TOKENS,
            temperature=OPENAI_TEMPERATURE,
        )
        content = response.choices[0].message.content if response.choices else None
        extracted = (content or "").strip()
    except Exception as e:
        log_operation(
            logger,
            operation="normalize_description",
            outcome="error",
            level=logging.ERROR,
            error=str(e),
        )
        return description

    return extracted or description


def search_gifs(term: str, limit: int = GIPHY_PICKER_LIMIT) -> List[str]:
    """
    Search Giphy for up to ``limit`` GIFs.

    Args:
        term: Search term
        limit: Maximum number of results

    Returns:
        Fixed-height rendition URLs in result order; empty when the API key
        is missing, the term is blank or the request fails
    """
    config = get_config()
    if not config.giphy_api_key or not term or not term.strip() or limit < 1:
        return []

    try:
        response = requests.get(
            GIPHY_SEARCH_URL,
            params={
                "api_key": config.giphy_api_key,
                "q": term.strip(),
                "limit": limit,
                "offset": 0,
                "rating": GIPHY_RATING,
                "lang": GIPHY_LANG,
            },
            timeout=config.http_timeout,
        )
        response.raise_for_status()
        results = response.json().get("data") or []
    except Exception as e:
        log_operation(
            logger,
            operation="search_gifs",
            outcome="error",
            level=logging.ERROR,
            term=term,
            error=str(e),
        )
        return []

    urls = []
    for result in results[:limit]:
        if not isinstance(result, dict):
            continue
        url = ((result.get("images") or {}).get("fixed_height") or {}).get("url")
        if url:
            urls.append(url)
    return urls


def search_gif(term: str) -> Optional[str]:
    """
    Search Giphy for a single GIF.

    Returns:
        URL of the first result's fixed-height rendition, or None
    """
    urls = search_gifs(term, limit=1)
    return urls[0] if urls else None


def find_gif_for_description(description: str) -> Optional[str]:
    """
    Normalize a description and look up a matching GIF.

    Returns:
        GIF URL, or None when enrichment is disabled, the description is
        blank or nothing was found
    """
    if not get_config().enrichment_enabled:
        return None
    if not description or not description.strip():
        return None

    term = normalize_description(description.strip())
    url = search_gif(term)
    log_operation(
        logger,
        operation="find_gif_for_description",
        outcome="found" if url else "not_found",
        level=logging.DEBUG,
        term=term,
    )
    return url
