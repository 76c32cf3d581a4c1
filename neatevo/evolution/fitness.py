"""
Fitness evaluation interfaces.

A Scorer turns each network of a generation into:
- score: the primary fitness, used by simple sorters
- bonus: meta-fitness such as novelty, 0.0 if unused
- outcomes: per-objective results for multi-objective sorters, None if unused

NoveltySearchTally helps scorers reward behaviour that has rarely been seen.
"""

import random
from abc import ABC, abstractmethod
from typing import List, Dict, Any, Optional, Tuple

from ..core.network import Network

ScoreResult = Tuple[float, float, Optional[List[float]]]


class Scorer(ABC):
    """Scores the networks of an experiment, one generation at a time."""

    @abstractmethod
    def score(self, network: Network, networks: List[Network], index: int) -> ScoreResult:
        """
        Score one network.

        Args:
            network: Network to score
            networks: Every network of this generation (for relative scoring)
            index: Position of network within networks

        Returns:
            Tuple of (score, bonus, outcomes)
        """

    def generation_start(self, generation_num: int) -> None:
        """Called before any network of a generation is scored."""

    def generation_details(self) -> Dict[str, Any]:
        """JSON-ready details to record alongside the generation."""
        return {}


class NoveltySearchTally:
    """
    Counts how often each result fingerprint has been seen.

    The tally is bounded: once max_fingerprints are stored, every unseen
    fingerprint evicts a random stored one to make space.
    """

    def __init__(self, max_fingerprints: int):
        if max_fingerprints <= 0:
            raise ValueError(f"max_fingerprints must be one or more: {max_fingerprints}")
        self.max_fingerprints = max_fingerprints
        self._counts: Dict[str, int] = {}
        self._fingerprints: List[str] = []

    def __len__(self) -> int:
        return len(self._counts)

    def __contains__(self, fingerprint: str) -> bool:
        return fingerprint in self._counts

    def seen(self, fingerprint: str) -> int:
        """Record a sighting and return the total count, including this one."""
        if fingerprint in self._counts:
            self._counts[fingerprint] += 1
            return self._counts[fingerprint]

        if len(self._counts) >= self.max_fingerprints:
            self._remove_random()

        self._counts[fingerprint] = 1
        self._fingerprints.append(fingerprint)
        return 1

    def _remove_random(self) -> None:
        index = random.randrange(len(self._fingerprints))
        # Swap-remove keeps eviction O(1)
        self._fingerprints[index], self._fingerprints[-1] = self._fingerprints[-1], self._fingerprints[index]
        evicted = self._fingerprints.pop()
        del self._counts[evicted]
