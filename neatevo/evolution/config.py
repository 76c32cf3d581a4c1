"""
Experiment configuration.

Configs are plain dataclasses validated on construction, convertible to and
from JSON-ready dictionaries, and loadable from disk:

    config = load_config('experiments/xor.json')
    save_config(config, Path('runs/xor/config.json'))
"""

from dataclasses import dataclass, field, asdict
from typing import List, Dict, Any, Optional, Union
from pathlib import Path
import json
import logging

from filelock import FileLock

from ..core.activations import is_activation
from ..core.inout import NetworkInOut

logger = logging.getLogger(__name__)


@dataclass
class SpeciationConfig:
    """
    Rules for deciding whether two genomes share a species.

    Attributes:
        threshold: Largest distance still counted as the same species;
            0.0 puts every genome in one species
        c1: Importance of excess genes (the younger genome's tail)
        c2: Importance of disjoint genes
        c3: Importance of weight differences in shared genes
    """
    threshold: float = 0.0
    c1: float = 1.0
    c2: float = 1.0
    c3: float = 0.4

    def __post_init__(self):
        if self.threshold < 0.0:
            raise ValueError(f"Speciation threshold must be non-negative: {self.threshold}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SpeciationConfig':
        return cls(**data)


@dataclass
class MutateConfig:
    """
    Rules for mating and mutating new members of the population.

    The four weights are relative: a weight of 6 is twice as likely to be
    picked as a weight of 3. All four at zero means a uniform pick.
    """
    available_node_functions: List[str] = field(
        default_factory=lambda: ['sigmoid', 'bipolar_sigmoid', 'gaussian', 'sine']
    )
    max_add_connection_attempts: int = 10
    mate_weight: int = 1
    add_node_weight: int = 1
    add_connection_weight: int = 1
    alter_connection_weight: int = 1

    def __post_init__(self):
        for name in self.available_node_functions:
            if not is_activation(name):
                raise ValueError(f"Unknown activation in available_node_functions: {name}")
        if self.max_add_connection_attempts < 1:
            raise ValueError(
                f"max_add_connection_attempts must be one or more: {self.max_add_connection_attempts}"
            )
        for name in ('mate_weight', 'add_node_weight', 'add_connection_weight', 'alter_connection_weight'):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative: {getattr(self, name)}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MutateConfig':
        return cls(**data)


@dataclass
class PopulationConfig:
    """How each generation's population is managed."""
    population_size: int = 50
    speciation: SpeciationConfig = field(default_factory=SpeciationConfig)
    mutate: MutateConfig = field(default_factory=MutateConfig)

    def __post_init__(self):
        if self.population_size < 1:
            raise ValueError(f"population_size must be one or more: {self.population_size}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'population_size': self.population_size,
            'speciation': self.speciation.to_dict(),
            'mutate': self.mutate.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PopulationConfig':
        return cls(
            population_size=data.get('population_size', 50),
            speciation=SpeciationConfig.from_dict(data.get('speciation', {})),
            mutate=MutateConfig.from_dict(data.get('mutate', {})),
        )


@dataclass
class EndCondition:
    """
    When an experiment stops. Zero disables a condition; with all three
    disabled the experiment only stops when asked to.

    Attributes:
        generation_num: Stop after this generation
        target_score: Stop once the highest score reaches this value
        stagnant_generation_count: Stop after this many generations
            without the highest score improving
    """
    generation_num: int = 0
    target_score: float = 0.0
    stagnant_generation_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EndCondition':
        return cls(**data)


@dataclass
class ExperimentConfig:
    """Everything needed to run one experiment."""
    inout: NetworkInOut
    population: PopulationConfig = field(default_factory=PopulationConfig)
    end_condition: EndCondition = field(default_factory=EndCondition)

    # Checkpointing
    checkpoint_every: int = 0
    checkpoint_dir: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'inout': self.inout.to_dict(),
            'population': self.population.to_dict(),
            'end_condition': self.end_condition.to_dict(),
            'checkpoint_every': self.checkpoint_every,
            'checkpoint_dir': self.checkpoint_dir,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ExperimentConfig':
        return cls(
            inout=NetworkInOut.from_dict(data['inout']),
            population=PopulationConfig.from_dict(data.get('population', {})),
            end_condition=EndCondition.from_dict(data.get('end_condition', {})),
            checkpoint_every=data.get('checkpoint_every', 0),
            checkpoint_dir=data.get('checkpoint_dir'),
        )


def load_config(path: Union[str, Path]) -> ExperimentConfig:
    """Load an experiment configuration from a JSON file."""
    path = Path(path)
    logger.info("Loading experiment config: '%s'", path)
    with FileLock(str(path) + '.lock'):
        with open(path, 'r') as f:
            data = json.load(f)
    return ExperimentConfig.from_dict(data)


def save_config(config: ExperimentConfig, path: Union[str, Path]) -> None:
    """Write an experiment configuration to a JSON file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with FileLock(str(path) + '.lock'):
        with open(path, 'w') as f:
            json.dump(config.to_dict(), f, indent=2)
