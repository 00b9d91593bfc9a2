"""
GitHub access shared by the badge generators.

Environment Variables:
  PAT_GITHUB        : Personal token. Falls back to GITHUB_TOKEN in Actions.
  GH_USER           : GitHub login the badges describe.
  DEBUG             : '1' => print [DEBUG] lines.
  GQL_MAX_RETRIES   : attempts per request (default 5).
  GQL_RETRY_BACKOFF : base of the exponential backoff in seconds (default 1.5).
"""

from __future__ import annotations
import os
import time
from typing import Dict, Any, Callable, Optional

import requests

GRAPHQL_URL = "https://api.github.com/graphql"
REST_URL = "https://api.github.com"

GH_TOKEN = os.environ.get("PAT_GITHUB") or os.environ.get("GITHUB_TOKEN")
GH_USER = os.environ.get("GH_USER", "statikfintechllc")
DEBUG = os.environ.get("DEBUG", "0") == "1"
MAX_RETRIES = int(os.environ.get("GQL_MAX_RETRIES", "5"))
RETRY_BACKOFF = float(os.environ.get("GQL_RETRY_BACKOFF", "1.5"))
USER_AGENT = "profile-badges"

QUERY_COUNT: Dict[str, int] = {}


def debug(msg: str):
    if DEBUG:
        print(f"[DEBUG] {msg}")


def count_query(tag: str):
    QUERY_COUNT[tag] = QUERY_COUNT.get(tag, 0) + 1


def headers() -> Dict[str, str]:
    h = {"User-Agent": USER_AGENT}
    if GH_TOKEN:
        h["Authorization"] = f"bearer {GH_TOKEN}"
    return h


def _backoff(attempt: int):
    time.sleep(RETRY_BACKOFF ** attempt)


def _send(send: Callable[[], requests.Response], tag: str) -> requests.Response:
    """Run `send` until it yields a non-5xx response.

    Server errors and network failures are retried with exponential backoff
    up to MAX_RETRIES attempts; the final failure propagates.
    """
    for attempt in range(1, MAX_RETRIES + 1):
        try:
            r = send()
        except (requests.Timeout, requests.ConnectionError) as e:
            if attempt < MAX_RETRIES:
                debug(f"{tag}: network error {e}, retry {attempt}")
                _backoff(attempt)
                continue
            raise
        if r.status_code >= 500 and attempt < MAX_RETRIES:
            debug(f"{tag}: {r.status_code} from server, retry {attempt}")
            _backoff(attempt)
            continue
        return r
    raise RuntimeError(f"{tag} failed without response")


def gql(query: str, variables: Optional[Dict[str, Any]] = None, tag: str = "gql") -> Dict[str, Any]:
    """POST a GraphQL query and return its `data` block."""
    count_query(tag)
    for attempt in range(1, MAX_RETRIES + 1):
        r = _send(
            lambda: requests.post(
                GRAPHQL_URL,
                json={"query": query, "variables": variables or {}},
                headers=headers(),
                timeout=40
            ),
            tag
        )
        if r.status_code != 200:
            raise RuntimeError(f"{tag} failed: {r.status_code} {r.text[:300]}")
        data = r.json()
        if data.get("errors"):
            messages = " | ".join(e.get("message", "") for e in data["errors"])
            if "rate limit" in messages.lower() and attempt < MAX_RETRIES:
                debug(f"{tag}: rate limit encountered, backoff retry {attempt}")
                _backoff(attempt)
                continue
            raise RuntimeError(f"{tag} GraphQL errors: {messages}")
        return data["data"]
    raise RuntimeError(f"{tag} failed after {MAX_RETRIES} attempts")


def rest_get(path: str, tag: str = "rest") -> Any:
    """GET a REST endpoint (path relative to the API root) and decode JSON."""
    count_query(tag)
    url = path if path.startswith("http") else f"{REST_URL}/{path.lstrip('/')}"
    r = _send(lambda: requests.get(url, headers=headers(), timeout=40), tag)
    if r.status_code != 200:
        raise RuntimeError(f"{tag} failed: {r.status_code} {r.text[:300]}")
    return r.json()


def fetch_bytes(url: str, tag: str = "asset") -> bytes:
    count_query(tag)
    r = _send(lambda: requests.get(url, headers={"User-Agent": USER_AGENT}, timeout=30), tag)
    if r.status_code != 200:
        raise RuntimeError(f"{tag} failed: {r.status_code}")
    return r.content
