"""
Sorters rank a generation's scored specimens from fittest to least fit.

Both sorters share fitness across species: the larger a specimen's species,
the worse its selection score, so no single species can take over the
population.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Sequence, Tuple, TYPE_CHECKING

from ..core.errors import InvariantError
from .hypercube import Hypercube
from .kdtree import calculate_hypervolume_indicators

if TYPE_CHECKING:
    from ..evolution.population import Specimen

SortResult = Tuple[float, str, List['Specimen']]


def _member_count(specimen: 'Specimen') -> int:
    if specimen.species_member_count < 1:
        raise InvariantError(
            "Specimen has no species member count; weight the species before sorting."
        )
    return specimen.species_member_count


def rank(
    specimens: List['Specimen'],
    reference_point: Sequence[float],
    maximize: Sequence[bool],
    weights: Sequence[float],
) -> SortResult:
    """
    Rank specimens by the hypervolume their outcomes cover.

    Each specimen's selection score is (indicator + volume) divided by its
    species member count. Ties fall back to raw volume, then raw indicator.

    Args:
        specimens: Weighted specimens with outcomes
        reference_point: Baseline per objective
        maximize: True where larger outcomes are fitter
        weights: Relative importance per objective

    Returns:
        Tuple of (best score, best summary, specimens in rank order). The
        best specimen is the one with the largest volume.
    """
    if not specimens:
        return 0.0, '', []

    cubes = [Hypercube.from_specimen(s, reference_point, maximize, weights) for s in specimens]
    calculate_hypervolume_indicators(cubes)

    for cube in cubes:
        cube.specimen.selection_score = (cube.indicator + cube.volume) / _member_count(cube.specimen)

    ordered = sorted(
        cubes,
        key=lambda c: (c.specimen.selection_score, c.volume, c.indicator),
        reverse=True,
    )

    best = ordered[0]
    for cube in ordered[1:]:
        if cube.volume > best.volume:
            best = cube

    outcomes = [float(o) for o in best.specimen.outcomes]
    summary = (
        f"indicator: {best.indicator:f}, volume: {best.volume:f}, "
        f"species_member_count: {best.specimen.species_member_count}, outcomes: {outcomes}"
    )
    return best.volume, summary, [c.specimen for c in ordered]


class Sorter(ABC):
    """Orders specimens from fittest to least fit."""

    @abstractmethod
    def sort(self, specimens: List['Specimen']) -> SortResult:
        """Return (best score, best summary, sorted specimens)."""

    @property
    @abstractmethod
    def is_maximize(self) -> bool:
        """True if higher best scores are fitter."""


@dataclass
class HypervolumeIndicatorSorter(Sorter):
    """
    Multi-objective sorter using hypervolume indicators.

    Attributes:
        reference_point: Baseline each outcome is measured from
        maximize: Per outcome, True if a higher value is fitter
        weights: Per outcome, relative influence on the ranking
    """
    reference_point: List[float]
    maximize: List[bool]
    weights: List[float]

    def __post_init__(self):
        if not self.reference_point:
            raise ValueError("reference_point must have values")
        if len(self.reference_point) != len(self.maximize) or len(self.maximize) != len(self.weights):
            raise ValueError(
                f"reference_point ({self.reference_point}), maximize ({self.maximize}), and "
                f"weights ({self.weights}) must all have the same number of values"
            )
        if any(w == 0.0 for w in self.weights):
            raise ValueError(f"Weights with a zero value are not allowed: {self.weights}")

    def sort(self, specimens: List['Specimen']) -> SortResult:
        return rank(specimens, self.reference_point, self.maximize, self.weights)

    @property
    def is_maximize(self) -> bool:
        return True


@dataclass
class SimpleSorter(Sorter):
    """
    Single-objective sorter on score plus bonus.

    Maximizing sorts descending by (score + bonus) / species size; minimizing
    sorts ascending by (score + bonus) * species size. Ties fall back to
    score, then bonus.
    """
    maximize: bool = True

    def sort(self, specimens: List['Specimen']) -> SortResult:
        if not specimens:
            return 0.0, '', []

        for specimen in specimens:
            total = specimen.score + specimen.bonus
            count = _member_count(specimen)
            specimen.selection_score = total / count if self.maximize else total * count

        if self.maximize:
            best = max(specimens, key=lambda s: s.score)
        else:
            best = min(specimens, key=lambda s: s.score)

        ordered = sorted(
            specimens,
            key=lambda s: (s.selection_score, s.score, s.bonus),
            reverse=self.maximize,
        )

        summary = (
            f"score: {best.score:f}, bonus: {best.bonus:f}, "
            f"species_member_count: {best.species_member_count}"
        )
        return best.score, summary, ordered

    @property
    def is_maximize(self) -> bool:
        return self.maximize
