"""
neatevo: NeuroEvolution of Augmenting Topologies.

Evolves small feed-forward neural networks by growing their structure one
gene at a time, grouping similar genomes into species, and ranking specimens
on one or many objectives.
"""

from .core import InvariantError, Gene, Genome, NetworkInOut, Network
from .evolution import (
    InnovationCounter,
    ExperimentConfig,
    PopulationConfig,
    SpeciationConfig,
    MutateConfig,
    EndCondition,
    load_config,
    save_config,
    Scorer,
    EvolutionEngine,
    TruncateSelector,
    TournamentSelector,
)
from .ranking import SimpleSorter, HypervolumeIndicatorSorter

__version__ = '0.1.0'

__all__ = [
    'InvariantError',
    'Gene',
    'Genome',
    'NetworkInOut',
    'Network',
    'InnovationCounter',
    'ExperimentConfig',
    'PopulationConfig',
    'SpeciationConfig',
    'MutateConfig',
    'EndCondition',
    'load_config',
    'save_config',
    'Scorer',
    'EvolutionEngine',
    'TruncateSelector',
    'TournamentSelector',
    'SimpleSorter',
    'HypervolumeIndicatorSorter',
]
