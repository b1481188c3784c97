"""Grouped aggregation shared by the preference analyzer."""
from typing import Dict, Hashable, Iterable, Sequence, Tuple, TypeVar

import pandas as pd

K = TypeVar("K", bound=Hashable)


def grouped_mean(pairs: Iterable[Tuple[K, float]], keys: Sequence[K]) -> Dict[K, float]:
    """
    Group (key, value) pairs by key and average each group.

    Args:
        pairs: (group key, value) pairs
        keys: Every group to report, in output order

    Returns:
        Dict mapping each of `keys` to its mean, 0.0 for groups with no values
    """
    frame = pd.DataFrame(list(pairs), columns=["key", "value"])
    if frame.empty:
        return {key: 0.0 for key in keys}

    frame["value"] = frame["value"].astype(float)
    means = frame.groupby("key", sort=False)["value"].mean()

    return {key: float(means[key]) if key in means.index else 0.0 for key in keys}
