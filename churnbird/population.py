"""Shared series population with snapshot and turnover entry points."""
import logging
import threading
import time
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List

from churnbird.cardinality import (
    DEFAULT_FIXED_LABEL_CARDINALITY,
    DEFAULT_FIXED_LABEL_NAME,
    generate_families,
    generate_series,
    replacement_count,
)
from churnbird.identity import IdentityGenerator
from churnbird.series import Family

logger = logging.getLogger(__name__)


class Population:
    """
    The mutable set of all families and series.

    A single lock guards both roles that touch the population: scrapes
    (`snapshot`) and churn (`turnover_cycle`). Both must run inside
    `locked()`. The random source is only used under the lock as well.
    Family count and per-family lengths never change, so they can be read
    without the lock.
    """

    def __init__(
        self,
        families: List[Family],
        identity: IdentityGenerator,
        fixed_label_name: str = DEFAULT_FIXED_LABEL_NAME,
        fixed_label_cardinality: int = DEFAULT_FIXED_LABEL_CARDINALITY
    ):
        self.families = families
        self.identity = identity
        self.fixed_label_name = fixed_label_name
        self.fixed_label_cardinality = fixed_label_cardinality
        self.lock = threading.Lock()
        self._owner = None
        self.sizes = [len(family.series) for family in families]

    @classmethod
    def generate(
        cls,
        num_families: int,
        max_series_per_family: int,
        seed: int,
        fixed_label_name: str = DEFAULT_FIXED_LABEL_NAME,
        fixed_label_cardinality: int = DEFAULT_FIXED_LABEL_CARDINALITY
    ) -> "Population":
        """Build a fresh random population from a seed."""
        identity = IdentityGenerator(seed)
        families = generate_families(
            num_families,
            max_series_per_family,
            identity,
            fixed_label_name,
            fixed_label_cardinality
        )
        return cls(families, identity, fixed_label_name, fixed_label_cardinality)

    @property
    def total_series(self) -> int:
        return sum(self.sizes)

    def family_sizes(self) -> List[Dict[str, Any]]:
        """Name and series count of every family, in population order."""
        return [
            {"name": family.name, "size": size}
            for family, size in zip(self.families, self.sizes)
        ]

    @contextmanager
    def locked(self) -> Iterator["Population"]:
        """Hold the population lock for a snapshot or turnover pass."""
        with self.lock:
            self._owner = threading.get_ident()
            try:
                yield self
            finally:
                self._owner = None

    def _require_lock(self, operation: str):
        if self._owner != threading.get_ident():
            raise RuntimeError(f"Population.{operation}() called without holding the lock")

    def snapshot(self) -> List[Family]:
        """
        Redraw every series value and return the live families.

        Values are standard-normal draws, one per series in family order.
        The returned list is shared; read it before releasing the lock.
        """
        self._require_lock("snapshot")
        start = time.time()

        values = iter(self.identity.normals(self.total_series))
        for family in self.families:
            for series in family.series:
                series.value = next(values)

        logger.debug(f"Generated new metric values in {time.time() - start:.3f}s")
        return self.families

    def turnover_cycle(self, rate: int) -> int:
        """
        Replace the leading series of every family with fresh ones.

        For each family a replacement count is drawn (see
        `replacement_count`) and that many new series overwrite positions
        0..n-1. Trailing positions are left untouched.

        Returns:
            Total number of series replaced
        """
        self._require_lock("turnover_cycle")
        if rate < 1:
            raise ValueError(f"Turnover rate must be >= 1, got {rate}")

        replaced = 0
        for family in self.families:
            num_to_replace = replacement_count(len(family.series), rate, self.identity)
            family.series[:num_to_replace] = generate_series(
                num_to_replace,
                self.identity,
                self.fixed_label_name,
                self.fixed_label_cardinality
            )
            replaced += num_to_replace

        return replaced
