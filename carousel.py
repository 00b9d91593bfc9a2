"""
Carousel layout: pages of cards sliding through a shared animation cycle.

Every page is animated over the same period (pages * page duration), starting
at 0s and repeating indefinitely. Each page only moves inside its own window
of that period, so the pages play as one round-robin sequence instead of N
independent loops drifting apart.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Sequence, Tuple

LINEAR = "0 0 1 1"
EASE_IN = "0.25 0.1 0.25 1"
EASE_HOLD = "0.25 0.1 0.25 1"
EASE_OUT = "0.42 0 0.58 1"
KEY_SPLINES = (LINEAR, EASE_IN, EASE_HOLD, EASE_OUT, LINEAR)

KEY_TIME_DIGITS = 4


@dataclass(frozen=True)
class Page:
    index: int
    items: Tuple[Any, ...]


@dataclass(frozen=True)
class AnimationSchedule:
    key_times: Tuple[float, ...]
    values: Tuple[float, ...]
    key_splines: Tuple[str, ...]
    t0: float
    t1: float
    duration: float

    def to_attrs(self) -> Dict[str, str]:
        """Attributes for an <animateTransform> element."""
        return {
            "attributeName": "transform",
            "type": "translate",
            "values": ";".join(_num(v) for v in self.values),
            "keyTimes": ";".join(f"{t:.{KEY_TIME_DIGITS}f}" for t in self.key_times),
            "keySplines": "; ".join(self.key_splines),
            "calcMode": "spline",
            "dur": f"{_num(self.duration)}s",
            "begin": "0s",
            "repeatCount": "indefinite",
        }


def _num(v: float) -> str:
    return f"{v:g}"


def paginate(items: Sequence[Any], page_size: int) -> List[Page]:
    return [
        Page(index=i, items=tuple(items[start:start + page_size]))
        for i, start in enumerate(range(0, len(items), page_size))
    ]


def monotone_key_times(times: Sequence[float]) -> Tuple[float, ...]:
    """Round to fixed precision without letting neighbours cross.

    Players reject keyTimes that decrease, so each rounded value is raised to
    at least its predecessor; the ends are pinned to 0 and 1.
    """
    out: List[float] = []
    for t in times:
        r = round(min(1.0, max(0.0, t)), KEY_TIME_DIGITS)
        if out and r < out[-1]:
            r = out[-1]
        out.append(r)
    out[0] = 0.0
    out[-1] = 1.0
    return tuple(out)


def schedule_for(index: int, pages: int, page_duration: float, hold_fraction: float,
                 viewport_width: float) -> AnimationSchedule:
    total = pages * page_duration
    t0 = index * page_duration / total
    t1 = (index + 1) * page_duration / total
    enter_k = (1 - hold_fraction) / 2
    exit_k = 1 - enter_k
    enter_end = t0 + enter_k * page_duration / total
    hold_end = t0 + exit_k * page_duration / total
    w = viewport_width
    return AnimationSchedule(
        key_times=monotone_key_times([0.0, t0, enter_end, hold_end, t1, 1.0]),
        values=(w, w, 0, 0, -w, -w),
        key_splines=KEY_SPLINES,
        t0=t0,
        t1=t1,
        duration=total,
    )


def layout(items: Sequence[Any], page_size: int, page_duration: float, hold_fraction: float,
           viewport_width: float) -> List[Tuple[Page, AnimationSchedule]]:
    """Group `items` into pages and schedule each page inside one shared cycle.

    Args:
        items: cards in display order (non-empty).
        page_size: cards per page.
        page_duration: seconds each page owns within the cycle.
        hold_fraction: share of a page's window spent centered.
        viewport_width: slide distance; pages rest at +W and leave to -W.
    Returns:
        [(Page, AnimationSchedule)] in page order.
    """
    if not items:
        raise ValueError("carousel needs at least one item")
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")
    if page_duration <= 0:
        raise ValueError(f"page_duration must be > 0, got {page_duration}")
    if not 0 < hold_fraction < 1:
        raise ValueError(f"hold_fraction must be in (0, 1), got {hold_fraction}")
    if viewport_width <= 0:
        raise ValueError(f"viewport_width must be > 0, got {viewport_width}")

    pages = paginate(items, page_size)
    n = len(pages)
    return [
        (page, schedule_for(page.index, n, page_duration, hold_fraction, viewport_width))
        for page in pages
    ]


def render_slides(layout_result: Sequence[Tuple[Page, AnimationSchedule]],
                  render_page: Callable[[Page], str], viewport_width: float,
                  clip_id: str = "frame") -> str:
    """Serialize a layout into <g class="slide"> groups with their animation."""
    slides = []
    for page, sched in layout_result:
        attrs = " ".join(f'{k}="{v}"' for k, v in sched.to_attrs().items())
        slides.append(f"""
  <g class="slide" transform="translate({_num(viewport_width)},0)" clip-path="url(#{clip_id})">
    {render_page(page)}
    <animateTransform {attrs}/>
  </g>""")
    return "".join(slides)
