"""Pick the WordPress image rendition that best fits a display width."""

from __future__ import annotations

import re
from typing import Iterable, Sequence

from .config import DEFAULT_IMAGE_HEIGHT, DEFAULT_IMAGE_WIDTH
from .models import ImageRef, SizeVariant

__all__ = [
    "OVERSIZE_PENALTIES",
    "UNDERSIZE_PENALTIES",
    "COMMON_SIZES",
    "COMMON_SIZE_BONUS",
    "MIN_WIDTH_RATIO",
    "score_variant",
    "best_variant",
    "synthesize_url",
    "select_size",
    "select_image",
]

# (ratio threshold, penalty), checked in order; first hit wins.
OVERSIZE_PENALTIES = ((2.5, 2000), (2.0, 1000), (1.5, 200))
UNDERSIZE_PENALTIES = ((0.6, 500), (0.8, 100))
# WordPress default thumbnail/medium/large widths are usually cached upstream.
COMMON_SIZES = frozenset({150, 300, 600, 768, 1024})
COMMON_SIZE_BONUS = -50
MIN_WIDTH_RATIO = 0.6

_SCALED_RE = re.compile(r"-scaled(?=\.[A-Za-z0-9]+$|$)")
_EXT_RE = re.compile(r"(\.[A-Za-z0-9]{2,5})$")


def _oversize_penalty(ratio: float) -> int:
    for threshold, penalty in OVERSIZE_PENALTIES:
        if ratio > threshold:
            return penalty
    return 0


def _undersize_penalty(ratio: float) -> int:
    for threshold, penalty in UNDERSIZE_PENALTIES:
        if ratio < threshold:
            return penalty
    return 0


def score_variant(width: int, target_width: int) -> float:
    """Lower is better."""

    ratio = width / target_width
    score = abs(width - target_width) + _oversize_penalty(ratio) + _undersize_penalty(ratio)
    if width in COMMON_SIZES:
        score += COMMON_SIZE_BONUS
    return score


def best_variant(variants: Iterable[SizeVariant], target_width: int) -> SizeVariant | None:
    if not target_width or target_width <= 0:
        return None
    minimum = target_width * MIN_WIDTH_RATIO
    best: SizeVariant | None = None
    best_score = 0.0
    for variant in variants or ():
        width = getattr(variant, "width", None)
        if not width or width <= 0 or width < minimum:
            continue
        score = score_variant(width, target_width)
        # strict comparison keeps the earliest variant on ties
        if best is None or score < best_score:
            best = variant
            best_score = score
    return best


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


def synthesize_url(url: str, width: int, height: int) -> str:
    """Insert ``-{width}x{height}`` before the extension, dropping ``-scaled``.

    >>> synthesize_url("https://wp.example.com/a/photo-scaled.jpg", 300, 200)
    'https://wp.example.com/a/photo-300x200.jpg'
    """

    base, sep, query = url.partition("?")
    base = _SCALED_RE.sub("", base)
    suffix = f"-{width}x{height}"
    match = _EXT_RE.search(base.rsplit("/", 1)[-1])
    if match:
        base = base[: -len(match.group(1))] + suffix + match.group(1)
    else:
        base = base + suffix
    return base + sep + query


def select_size(
    variants: Sequence[SizeVariant] | None,
    target_width: int,
    *,
    source_url: str = "",
    width: int | None = None,
    height: int | None = None,
    default_width: int = DEFAULT_IMAGE_WIDTH,
    default_height: int = DEFAULT_IMAGE_HEIGHT,
) -> SizeVariant:
    """Return the best-fitting variant, or a fallback built from the original.

    Fallbacks, in order: the original at its intrinsic size when it is not
    wider than the target; a synthesised ``-WxH`` rendition URL when the
    intrinsic size is known; the original with ``default_width`` and
    ``default_height``.
    """

    chosen = best_variant(variants or (), target_width)
    if chosen is not None:
        return chosen

    if width and height and width > 0 and height > 0:
        if target_width <= 0 or width <= target_width:
            return SizeVariant(url=source_url, width=width, height=height, name="full", synthesized=True)
        target_height = _round_half_up(height / width * target_width)
        return SizeVariant(
            url=synthesize_url(source_url, target_width, target_height),
            width=target_width,
            height=target_height,
            name=f"{target_width}x{target_height}",
            synthesized=True,
        )

    return SizeVariant(
        url=source_url,
        width=default_width,
        height=default_height,
        name="full",
        synthesized=True,
    )


def select_image(image: ImageRef | None, target_width: int, **kwargs) -> SizeVariant | None:
    """``select_size`` for an :class:`ImageRef`; ``None`` when there is no image."""

    if image is None:
        return None
    return select_size(
        image.variants,
        target_width,
        source_url=image.source_url,
        width=image.width,
        height=image.height,
        **kwargs,
    )
