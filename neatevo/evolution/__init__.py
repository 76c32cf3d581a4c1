"""
NEAT evolution: mutation, speciation, population management and the
experiment engine.
"""

from .innovation import InnovationCounter
from .config import (
    SpeciationConfig,
    MutateConfig,
    PopulationConfig,
    EndCondition,
    ExperimentConfig,
    load_config,
    save_config,
)
from .operators import (
    new_network,
    add_connection,
    add_node,
    mutate_add_node,
    mutate_add_connection,
    mutate_change_weight,
    mate,
    TruncateSelector,
    TournamentSelector,
    tournament_selection,
)
from .speciation import speciation_distance, is_same_species
from .population import Specimen, Species, Population, mate_mutate
from .fitness import Scorer, NoveltySearchTally
from .checkpoint import EvolutionCheckpoint, EvolutionHistory, GenerationStats, generate_run_id
from .engine import EvolutionEngine, EvolutionResult

__all__ = [
    'InnovationCounter',
    'SpeciationConfig',
    'MutateConfig',
    'PopulationConfig',
    'EndCondition',
    'ExperimentConfig',
    'load_config',
    'save_config',
    'new_network',
    'add_connection',
    'add_node',
    'mutate_add_node',
    'mutate_add_connection',
    'mutate_change_weight',
    'mate',
    'TruncateSelector',
    'TournamentSelector',
    'tournament_selection',
    'speciation_distance',
    'is_same_species',
    'Specimen',
    'Species',
    'Population',
    'mate_mutate',
    'Scorer',
    'NoveltySearchTally',
    'EvolutionCheckpoint',
    'EvolutionHistory',
    'GenerationStats',
    'generate_run_id',
    'EvolutionEngine',
    'EvolutionResult',
]
