"""Value distribution of each feature over a set of pairs."""

from __future__ import annotations

from collections import Counter
from typing import Any, Iterable

from ..models import CoreferencePair, FeatureType


class FeatureDistribution:
    """
    Counts how often each feature value occurs.

    Numeric features additionally report their average value.
    """

    def __init__(self):
        self.counts: dict[str, Counter] = {}
        self.types: dict[str, FeatureType] = {}
        self.totals: dict[str, float] = {}
        self.pair_count = 0

    def add(self, pairs: Iterable[CoreferencePair]) -> None:
        for pair in pairs:
            self.pair_count += 1
            for feature in pair.features.values():
                self.types.setdefault(feature.name, feature.feature_type)
                self.counts.setdefault(feature.name, Counter())[feature.string_value] += 1
                if feature.feature_type == FeatureType.NUMERIC:
                    self.totals[feature.name] = self.totals.get(feature.name, 0.0) + float(feature.value)

    def average(self, name: str) -> float:
        seen = sum(self.counts.get(name, Counter()).values())
        if seen == 0:
            return 0.0
        return self.totals.get(name, 0.0) / seen

    def to_dict(self) -> dict[str, Any]:
        features = {}
        for name, counts in self.counts.items():
            entry: dict[str, Any] = {"type": self.types[name].value}
            if self.types[name] == FeatureType.NUMERIC:
                entry["counts"] = dict(sorted(counts.items(), key=lambda item: float(item[0])))
                entry["average"] = self.average(name)
            else:
                entry["counts"] = dict(counts.most_common())
            features[name] = entry
        return {"pairs": self.pair_count, "features": features}
