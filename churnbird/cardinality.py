"""Cardinality management: random series and family generation."""
from typing import List

from churnbird.identity import IdentityGenerator
from churnbird.series import Family, Series, GAUGE

MIN_RANDOM_LABELS = 1
MAX_RANDOM_LABELS = 9
DEFAULT_FIXED_LABEL_NAME = "fixed_label"
DEFAULT_FIXED_LABEL_CARDINALITY = 2


def generate_series(
    count: int,
    identity: IdentityGenerator,
    fixed_label_name: str = DEFAULT_FIXED_LABEL_NAME,
    fixed_label_cardinality: int = DEFAULT_FIXED_LABEL_CARDINALITY
) -> List[Series]:
    """
    Generate `count` fresh series with random labels.

    Each series gets 1-9 random (key, value) pairs followed by the fixed
    label, whose value is one of the first `fixed_label_cardinality` letters.

    Args:
        count: Number of series to build
        identity: Random source; advanced in label-count, label pairs,
            fixed-label order for every series
        fixed_label_name: Key of the fixed label
        fixed_label_cardinality: Number of distinct fixed-label values

    Returns:
        List of series with values left at 0.0
    """
    result = []
    for _ in range(count):
        num_labels = identity.integer_between(MIN_RANDOM_LABELS, MAX_RANDOM_LABELS)
        labels = []
        for _ in range(num_labels):
            key = identity.string()
            value = identity.string()
            labels.append((key, value))
        labels.append((fixed_label_name, identity.letter(fixed_label_cardinality)))
        result.append(Series(tuple(labels)))

    return result


def family_size_bounds(max_series_per_family: int):
    """Inclusive (low, high) bounds for a family's series count."""
    return (max_series_per_family + 1) // 2, max_series_per_family


def generate_families(
    num_families: int,
    max_series_per_family: int,
    identity: IdentityGenerator,
    fixed_label_name: str = DEFAULT_FIXED_LABEL_NAME,
    fixed_label_cardinality: int = DEFAULT_FIXED_LABEL_CARDINALITY
) -> List[Family]:
    """
    Generate `num_families` gauge families.

    Each family holds between ceil(M/2) and M series so that downstream
    systems see variable-width families.
    """
    low, high = family_size_bounds(max_series_per_family)

    families = []
    for _ in range(num_families):
        num_series = identity.integer_between(low, high)
        name = identity.string()
        series = generate_series(
            num_series,
            identity,
            fixed_label_name,
            fixed_label_cardinality
        )
        families.append(Family(name=name, series=series, type=GAUGE))

    return families


def replacement_count(length: int, rate: int, identity: IdentityGenerator) -> int:
    """
    Number of series to replace in a family of `length` during one cycle.

    The count lies in [length // rate, length // rate + (rate - 1) * length // rate - 1].
    When that band is empty (rate == 1 or a tiny family) the whole family
    is replaced.
    """
    if rate < 1:
        raise ValueError(f"Turnover rate must be >= 1, got {rate}")

    min_portion = length // rate
    most_of_series = (rate - 1) * length // rate
    if most_of_series > 0:
        return min_portion + identity.integer(most_of_series)
    return length
