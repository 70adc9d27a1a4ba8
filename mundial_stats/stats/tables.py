"""
Shared building blocks for derived tables: frequency counts and
dimension image lookup.
"""

from collections import Counter
from typing import Iterable

import pandas as pd

from mundial_stats.config import PERCENT_DECIMALS
from mundial_stats.models import Dimension, keep_none
from mundial_stats.utils import clean_key, round_half_up

FREQUENCY_COLUMNS = ["name", "count"]


def count_values(values: Iterable[str]) -> list[tuple[str, int]]:
    """
    Count non-blank values, most frequent first.

    Ties keep first-encountered order.
    """
    counts = Counter(v for v in values if v and v.strip())
    # Counter preserves insertion order and sorted() is stable
    return sorted(counts.items(), key=lambda item: item[1], reverse=True)


def modal_value(values: Iterable[str]) -> str | None:
    """Most frequent non-blank value, or None."""
    counted = count_values(values)
    return counted[0][0] if counted else None


def frequency_table(values: Iterable[str], top_n: int | None = None) -> pd.DataFrame:
    """Frequency DataFrame (name, count), optionally cut to the top_n rows."""
    counted = count_values(values)
    if top_n is not None:
        counted = counted[:top_n]
    return pd.DataFrame(counted, columns=FREQUENCY_COLUMNS)


def share_table(
    values: Iterable[str],
    total: int,
    images: dict[str, str] | None = None,
) -> pd.DataFrame:
    """
    Frequency DataFrame with each count's share of ``total``.

    Args:
        values: Values to count
        total: Denominator for ``percent`` (0 gives 0.0 everywhere)
        images: Optional image index from ``image_index``

    Returns:
        DataFrame with columns name, count, percent, image
    """
    rows = []
    for name, count in count_values(values):
        percent = round_half_up(count / total * 100, PERCENT_DECIMALS) if total > 0 else 0.0
        image = lookup_image(images, name) if images is not None else None
        rows.append((name, count, percent, image))
    df = pd.DataFrame(rows, columns=["name", "count", "percent", "image"])
    return keep_none(df, ["image"])


def image_index(dimensions: Iterable[Dimension]) -> dict[str, str]:
    """
    Map trimmed, case-folded dimension names to images.

    The first entry wins when names collide; entries without an image are
    left out.
    """
    index: dict[str, str] = {}
    for dim in dimensions:
        key = clean_key(dim.name)
        if dim.image and key not in index:
            index[key] = dim.image
    return index


def lookup_image(index: dict[str, str] | None, name: str | None) -> str | None:
    """Image for name ignoring case and surrounding whitespace, or None."""
    if not index or not name:
        return None
    return index.get(clean_key(name))
