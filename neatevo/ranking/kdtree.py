"""
K-D tree over hypercubes.

The tree splits on cube dimensions round-robin by depth, pivoting on the
median. Every node also records the lower and upper bound of its subtree in
each dimension, which lets domination and indicator searches skip subtrees
that cannot affect the cube being examined.
"""

from typing import List, Optional

import numpy as np

from ..core.errors import InvariantError
from .hypercube import Hypercube, move_indicator_base, calculate_hypervolume


class KDNode:
    """One hypercube in the tree plus the bounds of its subtree."""

    def __init__(self, cube: Hypercube, axis: int):
        self.cube = cube
        self.axis = axis
        self.left: Optional['KDNode'] = None
        self.right: Optional['KDNode'] = None
        self.lower = cube.dimensions.copy()
        self.upper = cube.dimensions.copy()

    def children(self) -> List['KDNode']:
        return [c for c in (self.left, self.right) if c is not None]


class HypercubeKDTree:
    """Spatial index over hypercubes of equal dimension."""

    def __init__(self, cubes: List[Hypercube]):
        if not cubes:
            raise InvariantError("Cannot build a K-D tree with no hypercubes.")
        self.k = cubes[0].dimension_count
        if self.k == 0:
            raise InvariantError("Cannot build a K-D tree from hypercubes with no dimensions.")
        for cube in cubes:
            if cube.dimension_count != self.k:
                raise InvariantError(
                    f"Hypercube has {cube.dimension_count} dimensions, expected {self.k}"
                )
        self.size = len(cubes)
        self.root = self._build(list(cubes), 0)

    def __len__(self) -> int:
        return self.size

    def _build(self, cubes: List[Hypercube], depth: int) -> Optional[KDNode]:
        if not cubes:
            return None

        axis = depth % self.k
        cubes.sort(key=lambda c: c.dimensions[axis])
        median = len(cubes) // 2

        node = KDNode(cubes[median], axis)
        node.left = self._build(cubes[:median], depth + 1)
        node.right = self._build(cubes[median + 1:], depth + 1)

        for child in node.children():
            node.lower = np.minimum(node.lower, child.lower)
            node.upper = np.maximum(node.upper, child.upper)
        return node

    def find_dominating(self, cube: Hypercube, strict: bool = False) -> Optional[Hypercube]:
        """
        Find another cube at least as long as this one in every dimension.

        Args:
            cube: Cube to check
            strict: Ignore cubes with exactly the same dimensions

        Returns:
            A dominating cube, or None if the cube is not dominated
        """
        stack = [self.root]
        while stack:
            node = stack.pop()
            # Nothing below can reach the cube's corner in some dimension
            if np.any(node.upper < cube.dimensions):
                continue
            other = node.cube
            if other is not cube and cube.is_dominated_by(other):
                if not strict or not cube.equals(other):
                    return other
            stack.extend(node.children())
        return None

    def indicator_base(self, cube: Hypercube) -> np.ndarray:
        """
        Grow the cube's indicator base against every cube not strictly dominated.

        Domination must already be marked on all cubes in the tree. Exactly
        tied cubes still count: they cover the same region, so it belongs to
        neither of them nor to the cube being measured.
        """
        limit = cube.dimensions
        base = np.zeros(self.k, dtype=float)
        stack = [self.root]
        while stack:
            node = stack.pop()
            # A subtree matters only if some value can sit strictly between base and limit
            if np.all((node.lower >= limit) | (node.upper <= base)):
                continue
            other = node.cube
            if other is not cube and not other.is_strictly_dominated:
                base = move_indicator_base(limit, base, other.dimensions)
            stack.extend(node.children())
        return base


def calculate_hypervolume_indicators(cubes: List[Hypercube]) -> None:
    """
    Mark dominated cubes and compute every cube's indicator in place.

    Exactly equal cubes dominate each other, so ties are settled by volume
    rather than both claiming an indicator. They are not strictly dominated,
    though, and keep shaping the indicator bases of every other cube.
    """
    if not cubes:
        return

    tree = HypercubeKDTree(cubes)

    for cube in cubes:
        cube.is_dominated = tree.find_dominating(cube) is not None
        cube.is_strictly_dominated = (
            cube.is_dominated and tree.find_dominating(cube, strict=True) is not None
        )

    for cube in cubes:
        if cube.is_dominated:
            cube.indicator = 0.0
            cube.indicator_base = None
            continue
        cube.indicator_base = tree.indicator_base(cube)
        cube.indicator = calculate_hypervolume(cube.dimensions, cube.indicator_base)
