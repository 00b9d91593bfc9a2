"""Helpers shared by the SVG generators: escaping, icons, file output."""

from __future__ import annotations
import os
from pathlib import Path
from typing import Union

from lxml import etree

from gh_api import debug

STAR_ICON = """
<path fill="none" stroke="#8abecf" stroke-width="2"
  d="M12 2.5l2.68 5.43 5.82.85-4.2 4.09.99 5.8L12 16.6 6.71 18.67l.99-5.8-4.2-4.09 5.82-.85L12 2.5z"/>
"""

FORK_ICON = """
<path fill="#8abecf" d="M5 5.372v.878c0 .414.336.75.75.75h4.5a.75.75 0 0 0 .75-.75v-.878a2.25 2.25 0 1 1 1.5 0v.878a2.25 2.25 0 0 1-2.25 2.25h-1.5v2.128a2.25 2.25 0 1 1-1.5 0V8.5h-1.5A2.25 2.25 0 0 1 3.5 6.25v-.878a2.25 2.25 0 1 1 1.5 0ZM5 3.25a.75.75 0 1 0-1.5 0 .75.75 0 0 0 1.5 0Zm6.75.75a.75.75 0 1 0 0-1.5.75.75 0 0 0 0 1.5Zm-3 8.75a.75.75 0 1 0-1.5 0 .75.75 0 0 0 1.5 0Z"/>
"""

_XML_ESCAPES = {"&": "&amp;", "<": "&lt;", ">": "&gt;", '"': "&quot;", "'": "&apos;"}


def xml_esc(s: str) -> str:
    return "".join(_XML_ESCAPES.get(ch, ch) for ch in (s or ""))


def squash_ws(s: str) -> str:
    return " ".join((s or "").split())


def format_int(num: int) -> str:
    return f"{num:,}"


def write_svg(path: Union[str, Path], svg_text: str) -> Path:
    """Parse `svg_text` and write it with an XML declaration.

    Parsing first means a templating mistake raises XMLSyntaxError here
    rather than producing a file browsers refuse to draw.
    """
    tree = etree.fromstring(svg_text.encode("utf-8"))
    out = Path(path)
    os.makedirs(out.parent, exist_ok=True)
    with open(out, "wb") as f:
        f.write(etree.tostring(tree, encoding="utf-8", xml_declaration=True))
    debug(f"wrote {len(svg_text)} chars of markup to {out}")
    return out
