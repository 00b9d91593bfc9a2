#!/usr/bin/env python3
"""
Animated repo cards: a 2-up carousel, SMIL only.

Pages slide in, dwell, and slide out in sequence; the whole sequence loops.
Each card links to its repository.

Environment Variables:
  PAT_GITHUB      : token (required). Falls back to GITHUB_TOKEN.
  GH_USER         : owner of the pinned / top repositories.
  REPOS           : optional comma list of `name` or `owner/name`; skips discovery.
  REPO_PAGE_SEC   : seconds each page owns in the cycle. Default 6.
  REPO_SLIDE_OUT  : output path. Default assets/repo-slide.svg.
"""

from __future__ import annotations
import os
import sys
import time
from typing import Dict, Any, List, Tuple

import gh_api
from gh_api import gql, debug
from carousel import layout, render_slides, Page
from textfit import fit, fit_title
from svg_common import xml_esc, squash_ws, format_int, write_svg, STAR_ICON, FORK_ICON

# ------------------ Config & Env ------------------
OUT = os.environ.get("REPO_SLIDE_OUT", "assets/repo-slide.svg")
REPOS_ENV = os.environ.get("REPOS", "").strip()
PAGE_SEC = float(os.environ.get("REPO_PAGE_SEC", "6"))
HOLD_FRAC = 0.55
PAGE_SIZE = 2
MAX_REPOS = 12

# Canvas, card, gap
W, H, CW, CH, G = 880, 280, 420, 230, 40
X0 = (W - (2 * CW + G)) // 2

MAX_SEGMENTS = 8
MIN_SEGMENT_FRAC = 0.04
FALLBACK_LANG_COLOR = "#374151"
OTHER_LANG_COLOR = "#6b7280"

# ------------------ Queries ------------------
Q_PINNED = """
query($login: String!){
  user(login: $login){
    pinnedItems(first: 12, types: [REPOSITORY]){
      nodes{
        ... on Repository { nameWithOwner name description stargazerCount forkCount isArchived }
      }
    }
  }
}"""

Q_TOP = """
query($login: String!){
  user(login: $login){
    repositories(first: 50, ownerAffiliations: [OWNER], isFork: false, orderBy: {field: STARGAZERS, direction: DESC}){
      nodes{ nameWithOwner name description stargazerCount forkCount isArchived }
    }
  }
}"""

Q_REPO = """
query($owner: String!, $name: String!){
  repository(owner: $owner, name: $name){
    nameWithOwner
    name
    description
    stargazerCount
    forkCount
    primaryLanguage{ name color }
    languages(first: 25, orderBy: {field: SIZE, direction: DESC}){
      totalSize
      edges{ size node{ name color } }
    }
  }
}"""


# ------------------ Data Collection ------------------
def parse_repo_list(raw: str, default_owner: str) -> List[Tuple[str, str]]:
    out = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        if "/" in part:
            owner, name = part.split("/", 1)
            out.append((owner, name))
        else:
            out.append((default_owner, part))
    return out


def _split_full(name_with_owner: str) -> Tuple[str, str]:
    owner, name = name_with_owner.split("/", 1)
    return owner, name


def take_repos(login: str) -> List[Tuple[str, str]]:
    """Explicit REPOS list, else pinned repos, else the most-starred owned repos."""
    if REPOS_ENV:
        return parse_repo_list(REPOS_ENV, login)[:MAX_REPOS]

    data = gql(Q_PINNED, {"login": login}, "pinned")
    nodes = ((data.get("user") or {}).get("pinnedItems") or {}).get("nodes") or []
    pins = [_split_full(n["nameWithOwner"]) for n in nodes if n and not n.get("isArchived")]
    if len(pins) >= PAGE_SIZE:
        debug(f"using {len(pins)} pinned repos")
        return pins[:MAX_REPOS]

    data = gql(Q_TOP, {"login": login}, "top_repos")
    nodes = ((data.get("user") or {}).get("repositories") or {}).get("nodes") or []
    tops = [_split_full(n["nameWithOwner"]) for n in nodes if not n.get("isArchived")]
    debug(f"only {len(pins)} pinned; using {len(tops[:MAX_REPOS])} top repos")
    return tops[:MAX_REPOS]


def language_segments(repo: Dict[str, Any]) -> List[Dict[str, Any]]:
    langs = (repo.get("languages") or {}).get("edges") or []
    total = (repo.get("languages") or {}).get("totalSize") or 0
    segs = []
    for e in langs:
        weight = e["size"] / total if total else 0
        if weight > 0:
            segs.append({
                "name": e["node"]["name"],
                "color": e["node"].get("color") or FALLBACK_LANG_COLOR,
                "weight": weight,
            })
    if not segs:
        primary = repo.get("primaryLanguage") or {}
        segs.append({
            "name": primary.get("name") or "Other",
            "color": primary.get("color") or OTHER_LANG_COLOR,
            "weight": 1,
        })
    return segs[:MAX_SEGMENTS]


def fetch_repo_details(repos: List[Tuple[str, str]]) -> List[Dict[str, Any]]:
    out = []
    for owner, name in repos:
        data = gql(Q_REPO, {"owner": owner, "name": name}, "repo_details")
        r = data.get("repository")
        if not r:
            print(f"[WARN] {owner}/{name} not found; skipping.")
            continue
        out.append({
            "owner": owner,
            "name": r["name"],
            "full": r["nameWithOwner"],
            "desc": r.get("description") or "",
            "stars": r.get("stargazerCount") or 0,
            "forks": r.get("forkCount") or 0,
            "segments": language_segments(r),
        })
    return out


# ------------------ Card ------------------
def bar_widths(weights: List[float], width: int, min_frac: float = MIN_SEGMENT_FRAC) -> List[int]:
    """Pixel widths for a stacked bar.

    Every segment gets at least `min_frac` of the bar so tiny languages stay
    visible; the last segment absorbs rounding so the sum equals `width`.
    """
    total = sum(weights) or 1
    hard = [max(w / total, min_frac) for w in weights]
    hard_sum = sum(hard)
    widths = [round(h / hard_sum * width) for h in hard]
    if widths:
        widths[-1] = width - sum(widths[:-1])
    return widths


def card(repo: Dict[str, Any], x: int) -> str:
    px, pw = 20, CW - 40
    py, ph = 165, 12

    segs = repo["segments"]
    bars = []
    cursor = px
    for s, wpx in zip(segs, bar_widths([s["weight"] for s in segs], pw)):
        bars.append(f'<rect x="{cursor}" y="{py}" width="{wpx}" height="{ph}" fill="{xml_esc(s["color"])}" />')
        cursor += wpx

    legends = []
    for i, s in enumerate(segs[:4]):
        lx = px + (i % 2) * 190
        ly = py + 30 + (i // 2) * 12
        legends.append(
            f'<rect x="{lx}" y="{ly - 8}" width="8" height="8" rx="2" fill="{xml_esc(s["color"])}"/>'
            f'<text x="{lx + 12}" y="{ly}" class="legend">{xml_esc(s["name"])}</text>'
        )

    bars_svg = "".join(bars)
    legends_svg = "".join(legends)

    title_lines = fit_title(repo["name"], max_chars=40, max_lines=2)
    title_svg = "".join(
        f'<text x="{px}" y="{30 + i * 20}" class="name">{xml_esc(line)}</text>'
        for i, line in enumerate(title_lines)
    )

    desc_top = 70 if len(title_lines) > 1 else 54
    desc_bottom = 130
    desc_height = max(12, desc_bottom - desc_top)
    wrap = fit(squash_ws(repo["desc"]), pw, desc_height, start_font_size=13, min_font_size=9, line_spacing=2)
    desc_svg = "".join(
        f'<text x="{px}" y="{desc_top + i * wrap.line_height}" style="font:400 {wrap.font_size}px system-ui" '
        f'class="desc">{xml_esc(line)}</text>'
        for i, line in enumerate(wrap.lines)
    )

    return f"""
  <a xlink:href="https://github.com/{xml_esc(repo["full"])}" target="_blank">
    <g transform="translate({x},20)">
      <rect x="0" y="0" rx="14" ry="14" width="{CW}" height="{CH}" fill="#0b1220" stroke="#1f2937"/>
      {title_svg}
      {desc_svg}
      <g class="badges" transform="translate(0,135)">
        <g transform="translate({CW - 180},0)">
          <rect x="0" y="-12" rx="10" ry="10" width="78" height="20" fill="#111827" stroke="#1f2937"/>
          <g transform="translate(8, -9)">
            <svg viewBox="0 0 24 24" width="16" height="16">{STAR_ICON}</svg>
          </g>
          <text x="26" y="2" class="pill">{format_int(repo["stars"])}</text>
        </g>
        <g transform="translate({CW - 90},0)">
          <rect x="0" y="-12" rx="10" ry="10" width="78" height="20" fill="#111827" stroke="#1f2937"/>
          <g transform="translate(4, -9)">
            <svg viewBox="0 0 24 24" width="18" height="18">{FORK_ICON}</svg>
          </g>
          <text x="26" y="2" class="pill">{format_int(repo["forks"])}</text>
        </g>
      </g>
      {bars_svg}
      {legends_svg}
    </g>
  </a>"""


def render_page(page: Page) -> str:
    return "".join(card(repo, X0 + i * (CW + G)) for i, repo in enumerate(page.items))


# ------------------ SVG Build ------------------
def build_repo_svg(repos: List[Dict[str, Any]]) -> str:
    slides = render_slides(layout(repos, PAGE_SIZE, PAGE_SEC, HOLD_FRAC, W), render_page, W)
    return f"""<svg width="{W}" height="{H}" viewBox="0 0 {W} {H}" xmlns="http://www.w3.org/2000/svg"
  xmlns:xlink="http://www.w3.org/1999/xlink" text-rendering="geometricPrecision" shape-rendering="geometricPrecision">
  <style>
    :root{{ color-scheme: dark; }}
    .name{{ font:800 18px system-ui; fill:#e5e7eb }}
    .desc{{ fill:#9ca3af }}
    .pill{{ font:700 12px system-ui; fill:#e5e7eb }}
    .legend{{ font:600 12px system-ui; fill:#cbd5e1 }}
    a:hover .name, a:hover .desc {{ text-decoration: underline; }}
  </style>
  <defs>
    <clipPath id="frame"><rect x="0" y="0" width="{W}" height="{H}" rx="8" ry="8"/></clipPath>
  </defs>
  {slides}
</svg>"""


# ------------------ Main ------------------
def main() -> int:
    if not gh_api.GH_TOKEN:
        print("ERROR: PAT_GITHUB env missing.", file=sys.stderr)
        return 1
    print("Collecting repositories...")
    t0 = time.time()

    selected = take_repos(gh_api.GH_USER)
    if not selected:
        raise RuntimeError("No repositories selected")
    details = fetch_repo_details(selected)
    if not details:
        raise RuntimeError("None of the selected repositories could be fetched")

    out = write_svg(OUT, build_repo_svg(details))
    print(f"wrote {out} ({len(details)} cards)")
    print("Done in {:.2f}s".format(time.time() - t0))
    print("GraphQL query counts:", gh_api.QUERY_COUNT)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
