"""
Checkpointing for evolutionary runs.

Enables:
- Saving experiment state for resumption
- Recording generation history with per-species summaries
- Preserving the final population and why the experiment ended
"""

from dataclasses import dataclass, field, asdict
from typing import List, Dict, Any, Optional, Union
from pathlib import Path
from datetime import datetime
import json
import logging
import uuid

from filelock import FileLock

from .population import Population

logger = logging.getLogger(__name__)


@dataclass
class SpeciesSummary:
    """Overview of one species at the end of a generation."""
    fingerprint: str
    specimens: int
    highest_score: float
    highest_bonus: float
    highest_selection_score: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def summarize_species(population: Population) -> List[SpeciesSummary]:
    """
    Summarize every species of a population.

    Highest values start at 0.0, so species whose members all scored
    negative report 0.0.
    """
    summaries = []
    for species in population.species:
        highest_score = 0.0
        highest_bonus = 0.0
        highest_selection = 0.0
        for specimen in species.specimens:
            highest_score = max(highest_score, specimen.score)
            highest_bonus = max(highest_bonus, specimen.bonus)
            highest_selection = max(highest_selection, specimen.selection_score)
        summaries.append(SpeciesSummary(
            fingerprint=species.genome.fingerprint(),
            specimens=len(species),
            highest_score=highest_score,
            highest_bonus=highest_bonus,
            highest_selection_score=highest_selection,
        ))
    return summaries


@dataclass
class GenerationStats:
    """Statistics for a single generation."""
    generation: int
    highest_score: float
    highest_experiment_score: float
    stagnant_generations: int
    best_score: float
    best_summary: str
    species_count: int
    specimen_count: int
    timestamp: str
    details: Dict[str, Any] = field(default_factory=dict)
    species: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GenerationStats':
        return cls(**data)


class EvolutionHistory:
    """
    Tracks experiment progress over generations.

    Records per-generation statistics for analysis after the run.
    """

    def __init__(self):
        self.generations: List[GenerationStats] = []
        self.score_trajectory: List[float] = []

    def __len__(self) -> int:
        return len(self.generations)

    def record_generation(
        self,
        generation: int,
        population: Population,
        highest_score: float,
        highest_experiment_score: float,
        stagnant_generations: int,
        best_score: float,
        best_summary: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> GenerationStats:
        """
        Record statistics for a completed generation.

        Args:
            generation: Generation number
            population: Population after survivors were re-added
            highest_score: Highest raw score this generation
            highest_experiment_score: Highest raw score of the whole run
            stagnant_generations: Generations since the run's highest score improved
            best_score: Sorter's best score
            best_summary: Sorter's description of its best specimen
            details: Scorer's generation details

        Returns:
            GenerationStats for this generation
        """
        stats = GenerationStats(
            generation=generation,
            highest_score=highest_score,
            highest_experiment_score=highest_experiment_score,
            stagnant_generations=stagnant_generations,
            best_score=best_score,
            best_summary=best_summary,
            species_count=len(population.species),
            specimen_count=population.specimen_count,
            timestamp=datetime.now().isoformat(),
            details=dict(details or {}),
            species=[s.to_dict() for s in summarize_species(population)],
        )
        self.generations.append(stats)
        self.score_trajectory.append(highest_score)
        return stats

    def to_dict(self) -> Dict[str, Any]:
        """Convert history to dictionary for serialization."""
        return {
            'generations': [g.to_dict() for g in self.generations],
            'score_trajectory': self.score_trajectory,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EvolutionHistory':
        """Restore history from dictionary."""
        history = cls()
        history.generations = [
            GenerationStats.from_dict(g) for g in data.get('generations', [])
        ]
        history.score_trajectory = data.get('score_trajectory', [])
        return history


@dataclass
class EvolutionCheckpoint:
    """
    Checkpoint for resuming experiments.

    Contains all state needed to continue an experiment from a saved point.
    """
    run_id: str
    generation: int
    last_gene_id: int                 # Innovation counter value
    config: Dict[str, Any]            # Serialized ExperimentConfig
    population: Dict[str, Any]        # Species with their specimens
    history: Dict[str, Any]           # Generation-by-generation stats
    timestamp: str
    highest_experiment_score: float = 0.0
    stagnant_generations: int = 0
    end_reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EvolutionCheckpoint':
        """Create from dictionary."""
        return cls(**data)

    def save(self, path: Union[str, Path]) -> None:
        """Save checkpoint to JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with FileLock(str(path) + '.lock'):
            with open(path, 'w') as f:
                json.dump(self.to_dict(), f, indent=2)
        logger.debug("Saved checkpoint for generation %d: '%s'", self.generation, path)

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'EvolutionCheckpoint':
        """Load checkpoint from JSON file."""
        path = Path(path)
        with FileLock(str(path) + '.lock'):
            with open(path, 'r') as f:
                data = json.load(f)
        return cls.from_dict(data)


def generate_run_id() -> str:
    """Generate unique run identifier."""
    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    short_uuid = uuid.uuid4().hex[:6]
    return f"neat_{timestamp}_{short_uuid}"
