#!/usr/bin/env python3
"""
Static repository card for a single project (avatar, description, stats, language bar).

Environment Variables:
  PAT_GITHUB        : token (required). Falls back to GITHUB_TOKEN.
  GH_USER           : repository owner.
  SERVER_CARD_REPO  : repository name. Default statik-server.
  SERVER_CARD_OUT   : output path. Default assets/statik-server-card.svg.
"""

from __future__ import annotations
import os
import sys
import time
import base64
from typing import Dict, List

import requests

import gh_api
from gh_api import rest_get, fetch_bytes, debug
from textfit import fit
from svg_common import xml_esc, squash_ws, write_svg, STAR_ICON, FORK_ICON

# ------------------ Config & Env ------------------
REPO = os.environ.get("SERVER_CARD_REPO", "statik-server")
OUT = os.environ.get("SERVER_CARD_OUT", "assets/statik-server-card.svg")

W, H = 480, 230
BAR_WIDTH = 440
DESC_X, DESC_Y, DESC_W, DESC_H = 48, 40, 400, 115

LANG_COLORS = {
    "Python": "#3572A5",
    "JavaScript": "#f1e05a",
    "TypeScript": "#3178c6",
    "Shell": "#89e051",
    "CSS": "#563d7c",
    "HTML": "#e34c26",
}
DEFAULT_COLOR = "#ccc"


def lang_color(lang: str) -> str:
    return LANG_COLORS.get(lang, DEFAULT_COLOR)


def avatar_data_uri(url: str) -> str:
    """Inline the avatar so the card renders inside <img>; keep the URL if the download fails."""
    try:
        b64 = base64.b64encode(fetch_bytes(url, "avatar")).decode("ascii")
    except (RuntimeError, requests.RequestException) as e:
        print(f"[WARN] Failed to fetch avatar ({e}); using remote URL.")
        return url
    return f"data:image/png;base64,{b64}"


def language_bar(langs: Dict[str, int], width: int = BAR_WIDTH) -> List[str]:
    total = sum(langs.values())
    if not total:
        return []
    rects = []
    x = 0.0
    for lang, size in langs.items():
        w = size / total * width
        rects.append(f'<rect x="{x:.2f}" y="195" width="{w:.2f}" height="6" fill="{lang_color(lang)}" />')
        x += w
    return rects


def build_card_svg(repo: Dict, avatar: str, langs: Dict[str, int]) -> str:
    language = repo.get("language") or "Unknown"
    wrap = fit(squash_ws(repo.get("description") or ""), DESC_W, DESC_H,
               start_font_size=13, min_font_size=9, line_spacing=5)
    desc_svg = "\n  ".join(
        f'<text x="{DESC_X}" y="{DESC_Y + (i + 1) * wrap.line_height}" class="desc" '
        f'style="font-size:{wrap.font_size}px">{xml_esc(line)}</text>'
        for i, line in enumerate(wrap.lines)
    )
    bar = "\n    ".join(language_bar(langs))
    return f"""<svg width="{W}" height="{H}" viewBox="0 0 {W} {H}" xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink">
  <defs>
    <clipPath id="avatar-clip">
      <rect x="20" y="16" width="20" height="20" rx="4"/>
    </clipPath>
  </defs>
  <style>
    .title {{ font: 600 16px sans-serif; fill: #ff4775; }}
    .desc  {{ font-family: sans-serif; fill: #8abecf; }}
    .meta  {{ font: 12px sans-serif; fill: #8abecf; dominant-baseline: middle; }}
  </style>

  <rect width="100%" height="100%" rx="10" fill="#0d1117"/>
  <image x="20" y="16" width="20" height="20" xlink:href="{xml_esc(avatar)}" clip-path="url(#avatar-clip)" preserveAspectRatio="xMidYMid slice"/>
  <text x="48" y="31" class="title">{xml_esc(repo["name"])}</text>
  {desc_svg}

  <circle cx="48" cy="180" r="6" fill="{lang_color(language)}"/>
  <text x="64" y="180" class="meta">{xml_esc(language)}</text>

  <g transform="translate(140, 172)">
    <svg viewBox="0 0 24 24" width="16" height="16">{STAR_ICON}</svg>
  </g>
  <text x="162" y="180" class="meta">{repo.get("stargazers_count", 0)}</text>

  <g transform="translate(200, 173)">
    <svg viewBox="0 0 24 24" width="16" height="16">{FORK_ICON}</svg>
  </g>
  <text x="222" y="180" class="meta">{repo.get("forks_count", 0)}</text>

  <g transform="translate(20, 0)">
    {bar}
  </g>
</svg>"""


def main() -> int:
    if not gh_api.GH_TOKEN:
        print("ERROR: PAT_GITHUB env missing.", file=sys.stderr)
        return 1
    t0 = time.time()
    owner = gh_api.GH_USER
    repo = rest_get(f"repos/{owner}/{REPO}", "repo")
    user = rest_get(f"users/{owner}", "user")
    langs = rest_get(f"repos/{owner}/{REPO}/languages", "languages")
    debug(f"{owner}/{REPO}: {len(langs)} languages")

    avatar = avatar_data_uri(user["avatar_url"])
    out = write_svg(OUT, build_card_svg(repo, avatar, langs))
    print(f"wrote {out}")
    print("Done in {:.2f}s".format(time.time() - t0))
    print("Query counts:", gh_api.QUERY_COUNT)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
