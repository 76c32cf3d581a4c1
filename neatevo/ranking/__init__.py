"""Multi-objective and single-objective ranking of scored specimens."""

from .hypercube import (
    Hypercube,
    normalize_outcomes,
    move_indicator_base,
    calculate_hypervolume,
)
from .kdtree import HypercubeKDTree, calculate_hypervolume_indicators
from .sorters import Sorter, HypervolumeIndicatorSorter, SimpleSorter, rank

__all__ = [
    'Hypercube',
    'normalize_outcomes',
    'move_indicator_base',
    'calculate_hypervolume',
    'HypercubeKDTree',
    'calculate_hypervolume_indicators',
    'Sorter',
    'HypervolumeIndicatorSorter',
    'SimpleSorter',
    'rank',
]
