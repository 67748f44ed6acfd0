"""Data structures for metric families and their series."""
from dataclasses import dataclass, field
from typing import List, Tuple

Label = Tuple[str, str]

GAUGE = "gauge"


@dataclass
class Series:
    """A single series: an immutable label set plus one gauge value."""
    labels: Tuple[Label, ...]
    value: float = 0.0

    def label_dict(self) -> dict:
        """Labels as a dict; a repeated key keeps its last value."""
        return dict(self.labels)


@dataclass
class Family:
    """A named group of gauge series."""
    name: str
    series: List[Series] = field(default_factory=list)
    type: str = GAUGE
