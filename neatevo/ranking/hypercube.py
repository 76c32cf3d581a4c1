"""
Hypercube view of a specimen's multi-objective outcomes.

Each outcome is measured as a non-negative length from a reference point:
maximized outcomes count how far they rise above it, minimized outcomes how
far they fall below it. An outcome on the wrong side of the reference point
contributes zero length, collapsing the cube's volume to zero.

The hypervolume indicator of a cube is the part of its volume that no other
cube covers. It is computed by growing an "indicator base" corner from the
origin toward the cube's own corner as other cubes encroach on it.
"""

import logging
from typing import Optional, Sequence, TYPE_CHECKING

import numpy as np

from ..core.errors import InvariantError

if TYPE_CHECKING:
    from ..evolution.population import Specimen

logger = logging.getLogger(__name__)


def normalize_outcomes(
    outcomes: Sequence[float],
    reference_point: Sequence[float],
    maximize: Sequence[bool],
    weights: Sequence[float],
) -> np.ndarray:
    """
    Convert raw outcomes into weighted, non-negative dimension lengths.

    Args:
        outcomes: Raw outcome per objective
        reference_point: Baseline per objective
        maximize: True where larger outcomes are fitter
        weights: Relative importance per objective

    Returns:
        Array of dimension lengths
    """
    if outcomes is None or len(outcomes) != len(reference_point):
        found = 0 if outcomes is None else len(outcomes)
        raise InvariantError(
            f"Outcomes must have {len(reference_point)} values to match the reference point, not: {found}"
        )

    dimensions = np.zeros(len(reference_point), dtype=float)
    for i, (outcome, reference, is_max, weight) in enumerate(
        zip(outcomes, reference_point, maximize, weights)
    ):
        if is_max and outcome > reference:
            dimensions[i] = (outcome - reference) * weight
        elif not is_max and outcome < reference:
            dimensions[i] = (reference - outcome) * weight
        else:
            logger.debug(
                "Outcome %d (%s) does not clear reference point %s (maximize=%s); volume is zero",
                i, outcome, reference, is_max,
            )
    return dimensions


def move_indicator_base(limit: np.ndarray, base: np.ndarray, other: np.ndarray) -> np.ndarray:
    """
    Grow an indicator base toward its limit where another cube encroaches.

    In each dimension where the other cube is shorter than the limit, the
    base rises to the other cube's length if that is higher.
    """
    return np.where(other < limit, np.maximum(base, other), base)


def calculate_hypervolume(limit: np.ndarray, base: np.ndarray) -> float:
    """Volume of the box spanning base to limit."""
    if np.any(base > limit):
        raise InvariantError(f"Indicator base {base} exceeds its hypercube {limit}")
    return float(np.prod(limit - base))


class Hypercube:
    """
    Ranking view of one specimen.

    Attributes:
        specimen: Specimen the cube was built from
        dimensions: Normalized outcome lengths
        volume: Product of the dimensions
        indicator: Volume not covered by any other cube (0.0 if dominated)
        indicator_base: Final base corner, None if dominated or not computed
        is_dominated: True if another cube is at least as long in every dimension
        is_strictly_dominated: True if a dominating cube differs from this one;
            exact ties leave it False so tied cubes still cover other cubes
    """

    def __init__(self, dimensions: Sequence[float], specimen: Optional['Specimen'] = None):
        self.specimen = specimen
        self.dimensions = np.asarray(dimensions, dtype=float)
        self.volume = float(np.prod(self.dimensions)) if self.dimensions.size else 0.0
        self.indicator = 0.0
        self.indicator_base: Optional[np.ndarray] = None
        self.is_dominated = False
        self.is_strictly_dominated = False

    @classmethod
    def from_specimen(
        cls,
        specimen: 'Specimen',
        reference_point: Sequence[float],
        maximize: Sequence[bool],
        weights: Sequence[float],
    ) -> 'Hypercube':
        dimensions = normalize_outcomes(specimen.outcomes, reference_point, maximize, weights)
        return cls(dimensions, specimen)

    @property
    def dimension_count(self) -> int:
        return int(self.dimensions.size)

    def is_dominated_by(self, other: 'Hypercube') -> bool:
        """True if no dimension of this cube exceeds the other's; ties dominate."""
        return bool(np.all(self.dimensions <= other.dimensions))

    def equals(self, other: 'Hypercube') -> bool:
        return bool(np.array_equal(self.dimensions, other.dimensions))

    def is_strictly_dominated_by(self, other: 'Hypercube') -> bool:
        """True if dominated by a cube with different dimensions."""
        return self.is_dominated_by(other) and not self.equals(other)

    def __repr__(self) -> str:
        return (
            f"Hypercube(dimensions={self.dimensions.tolist()}, volume={self.volume:.6f}, "
            f"indicator={self.indicator:.6f}, dominated={self.is_dominated})"
        )
