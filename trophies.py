#!/usr/bin/env python3
"""
Animated trophies: a 2-card carousel of lifetime GitHub statistics.

Data:
- lifetime window (account createdAt -> now)
- stars = sum of stargazers over owned non-fork repositories

Environment Variables:
  PAT_GITHUB         : token (required). Falls back to GITHUB_TOKEN.
  GH_USER            : GitHub login.
  TROPHIES_PAGE_SEC  : seconds each page owns in the cycle. Default 6.
  TROPHIES_OUT       : output path. Default assets/trophies.svg.
"""

from __future__ import annotations
import os
import sys
import time
import datetime
from typing import Dict, Any, List, Tuple

from dateutil import parser as dateparser
from dateutil import relativedelta

import gh_api
from gh_api import gql, debug
from carousel import layout, render_slides, Page
from svg_common import xml_esc, format_int, write_svg

# ------------------ Config & Env ------------------
OUT = os.environ.get("TROPHIES_OUT", "assets/trophies.svg")
PAGE_SEC = float(os.environ.get("TROPHIES_PAGE_SEC", "6"))
HOLD_FRAC = 0.75
PAGE_SIZE = 2

W, H, CW, CH, G = 760, 150, 300, 120, 40
X0 = (W - (2 * CW + G)) // 2

CONTRIB_FIELDS = [
    "totalCommitContributions",
    "totalIssueContributions",
    "totalPullRequestContributions",
    "totalPullRequestReviewContributions",
    "totalRepositoryContributions",
    "totalContributions",
]

# ------------------ Queries ------------------
Q_USER = """
query($login: String!){
  user(login: $login){
    createdAt
    followers{ totalCount }
  }
}"""

Q_OWNED = """
query($login: String!, $cursor: String){
  user(login: $login){
    repositories(ownerAffiliations: [OWNER], isFork: false, first: 100, after: $cursor){
      totalCount
      nodes{ stargazerCount }
      pageInfo{ hasNextPage endCursor }
    }
  }
}"""

Q_CONTRIB = """
query($login: String!, $from: DateTime!, $to: DateTime!){
  user(login: $login){
    contributionsCollection(from: $from, to: $to){
      totalCommitContributions
      totalIssueContributions
      totalPullRequestContributions
      totalPullRequestReviewContributions
      totalRepositoryContributions
      contributionCalendar{ totalContributions }
    }
  }
}"""


def iso(dt: datetime.datetime) -> str:
    return dt.astimezone(datetime.timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


# ------------------ Data Collection ------------------
def get_user(login: str) -> Tuple[datetime.datetime, int]:
    """Return (createdAt, follower count)."""
    u = gql(Q_USER, {"login": login}, "user_getter")["user"]
    return dateparser.isoparse(u["createdAt"]), u["followers"]["totalCount"]


def get_owned_repos_and_stars(login: str) -> Tuple[int, int]:
    stars = 0
    repo_count = 0
    cursor = None
    while True:
        data = gql(Q_OWNED, {"login": login, "cursor": cursor}, "repos_stars")
        repos = data["user"]["repositories"]
        repo_count = repos["totalCount"]
        for n in repos["nodes"]:
            stars += n.get("stargazerCount") or 0
        if not repos["pageInfo"]["hasNextPage"]:
            break
        cursor = repos["pageInfo"]["endCursor"]
    return repo_count, stars


def year_windows(start: datetime.datetime, end: datetime.datetime) -> List[Tuple[datetime.datetime, datetime.datetime]]:
    """Split [start, end] into consecutive spans no longer than one year.

    contributionsCollection rejects ranges over a year.
    """
    windows = []
    cur = start
    while cur < end:
        nxt = cur + relativedelta.relativedelta(years=1)
        windows.append((cur, min(nxt - datetime.timedelta(seconds=1), end)))
        cur = nxt
    return windows


def get_lifetime_contributions(login: str, created: datetime.datetime,
                               now: datetime.datetime) -> Dict[str, int]:
    totals = {f: 0 for f in CONTRIB_FIELDS}
    for start, end in year_windows(created, now):
        data = gql(Q_CONTRIB, {"login": login, "from": iso(start), "to": iso(end)}, "contributions")
        c = data["user"]["contributionsCollection"]
        for f in CONTRIB_FIELDS[:-1]:
            totals[f] += c.get(f) or 0
        totals["totalContributions"] += c["contributionCalendar"]["totalContributions"]
        debug(f"contributions {iso(start)}..{iso(end)}: {c['contributionCalendar']['totalContributions']}")
    return totals


def collect_trophies(login: str) -> List[Dict[str, Any]]:
    created, followers = get_user(login)
    repo_count, stars = get_owned_repos_and_stars(login)
    c = get_lifetime_contributions(login, created, datetime.datetime.now(datetime.timezone.utc))
    return [
        {"title": "Commits", "value": c["totalCommitContributions"], "desc": "Commit contributions across all repos."},
        {"title": "Followers", "value": followers, "desc": "People following this account."},
        {"title": "Stars Earned", "value": stars, "desc": "Stargazers on owned repositories."},
        {"title": "Reviews", "value": c["totalPullRequestReviewContributions"], "desc": "Pull request reviews submitted."},
        {"title": "Issues", "value": c["totalIssueContributions"], "desc": "Issues created."},
        {"title": "Repositories", "value": repo_count, "desc": "Owned non-fork repositories."},
        {"title": "Pull Requests", "value": c["totalPullRequestContributions"], "desc": "Pull requests opened."},
        {"title": "Total Activity", "value": c["totalContributions"], "desc": "All recorded contributions."},
    ]


# ------------------ Cards ------------------
def grade(value: int) -> str:
    if value > 5000:
        return "S"
    if value > 1000:
        return "A"
    return "B"


def glow(x: int, y: int, w: int, h: int) -> str:
    return f"""
  <g filter="url(#glow)">
    <rect x="{x}" y="{y}" width="{w}" height="{h}" rx="18" ry="18" fill="#0ea5e9" opacity="0.14">
      <animate attributeName="opacity" values="0.10;0.20;0.10" dur="2s" repeatCount="indefinite"/>
    </rect>
  </g>"""


def card(t: Dict[str, Any], x: int) -> str:
    return f"""
  {glow(x - 6, 4, CW + 12, CH + 12)}
  <g transform="translate({x},10)">
    <rect x="0" y="0" rx="14" ry="14" width="{CW}" height="{CH}" fill="#0b1220" stroke="#1f2937"/>
    <text x="20" y="34" class="cardTitle">{xml_esc(t["title"])}</text>
    <text x="20" y="70" class="cardValue">{format_int(t["value"])} <tspan class="grade">[{grade(t["value"])}]</tspan></text>
    <text x="20" y="96" class="cardDesc">{xml_esc(t["desc"])}</text>
  </g>"""


def render_page(page: Page) -> str:
    return "".join(card(t, X0 + i * (CW + G)) for i, t in enumerate(page.items))


# ------------------ SVG Build ------------------
def build_trophy_svg(trophies: List[Dict[str, Any]]) -> str:
    slides = render_slides(layout(trophies, PAGE_SIZE, PAGE_SEC, HOLD_FRAC, W), render_page, W)
    return f"""<svg width="{W}" height="{H}" viewBox="0 0 {W} {H}" xmlns="http://www.w3.org/2000/svg" text-rendering="geometricPrecision" shape-rendering="geometricPrecision">
  <style>
    :root{{ color-scheme: dark; }}
    .cardTitle{{ font:700 16px system-ui; fill:#e5e7eb }}
    .cardValue{{ font:800 22px system-ui; fill:#60a5fa }}
    .grade{{ font:700 16px system-ui; fill:#e11d48 }}
    .cardDesc{{ font:12px system-ui; fill:#9ca3af }}
  </style>
  <defs>
    <clipPath id="frame"><rect x="0" y="0" width="{W}" height="{H}" rx="8" ry="8"/></clipPath>
    <filter id="glow" x="-50%" y="-50%" width="200%" height="200%">
      <feGaussianBlur stdDeviation="6" result="b"/>
      <feMerge><feMergeNode in="b"/><feMergeNode in="SourceGraphic"/></feMerge>
    </filter>
  </defs>
  {slides}
</svg>"""


# ------------------ Main ------------------
def main() -> int:
    if not gh_api.GH_TOKEN:
        print("ERROR: PAT_GITHUB env missing.", file=sys.stderr)
        return 1
    print("Collecting stats...")
    t0 = time.time()

    trophies = collect_trophies(gh_api.GH_USER)
    out = write_svg(OUT, build_trophy_svg(trophies))

    print(f"wrote {out}")
    print("Done in {:.2f}s".format(time.time() - t0))
    print("GraphQL query counts:", gh_api.QUERY_COUNT)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
