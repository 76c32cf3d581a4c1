"""
Population management for a NEAT experiment.

Handles:
- Grouping scored specimens into species (first compatible species wins)
- Filling the population back out by mating and mutating existing specimens
- Per-species weighting used for fitness sharing
- Dropping species that lost all their members

Species order is significant. Parent sampling treats every specimen of every
species as one contiguous sequence, so species are only ever appended or
pruned, never reordered.
"""

import random
from dataclasses import dataclass
from typing import List, Dict, Any, Optional, Tuple

from ..core.errors import InvariantError
from ..core.genes import Genome
from ..core.inout import NetworkInOut
from ..core.network import Network
from .config import PopulationConfig, SpeciationConfig, MutateConfig
from .innovation import InnovationCounter
from .operators import mate, mutate_add_node, mutate_add_connection, mutate_change_weight
from .speciation import is_same_species

CHANGE_MATE = 'mate'
CHANGE_ADD_NODE = 'add_node'
CHANGE_ADD_CONNECTION = 'add_connection'
CHANGE_ALTER_CONNECTION = 'alter_connection'


@dataclass
class Specimen:
    """
    A scored network within one generation.

    selection_score, speciation_distance and species_member_count are
    recomputed every generation.
    """
    network: Network
    score: float = 0.0
    bonus: float = 0.0
    outcomes: Optional[List[float]] = None
    selection_score: float = 0.0
    speciation_distance: float = 0.0
    species_member_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'genome': self.network.genome.to_dict(),
            'score': self.score,
            'bonus': self.bonus,
            'outcomes': list(self.outcomes) if self.outcomes is not None else None,
            'selection_score': self.selection_score,
            'speciation_distance': self.speciation_distance,
            'species_member_count': self.species_member_count,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], inout: NetworkInOut) -> 'Specimen':
        return cls(
            network=Network(inout, Genome.from_dict(data['genome'])),
            score=data.get('score', 0.0),
            bonus=data.get('bonus', 0.0),
            outcomes=data.get('outcomes'),
            selection_score=data.get('selection_score', 0.0),
            speciation_distance=data.get('speciation_distance', 0.0),
            species_member_count=data.get('species_member_count', 0),
        )


class Species:
    """
    Specimens within speciation distance of a representative genome.

    The representative is a clone of the founding specimen's genome and is
    never replaced while the species exists.
    """

    def __init__(self, founder: Specimen):
        self.genome = founder.network.genome.clone()
        founder.speciation_distance = 0.0
        self.specimens: List[Specimen] = [founder]
        self.first_index = 0
        self.last_index = 0

    def __len__(self) -> int:
        return len(self.specimens)

    def try_add(self, specimen: Specimen, config: SpeciationConfig) -> bool:
        """Add the specimen if it is compatible with the representative."""
        same, distance = is_same_species(self.genome, specimen.network.genome, config)
        if same:
            specimen.speciation_distance = distance
            self.specimens.append(specimen)
        return same

    def pick(self, population_index: int) -> Optional[Tuple[Specimen, int]]:
        """
        Resolve a population-wide index to (specimen, local index).

        Returns None if the index falls outside this species' range.
        """
        if population_index < self.first_index or population_index > self.last_index:
            return None
        local_index = population_index - self.first_index
        return self.specimens[local_index], local_index

    def weight(self) -> None:
        """Stamp every member with the current species size."""
        count = len(self.specimens)
        for specimen in self.specimens:
            specimen.species_member_count = count

    def to_dict(self) -> Dict[str, Any]:
        return {
            'genome': self.genome.to_dict(),
            'specimens': [s.to_dict() for s in self.specimens],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], inout: NetworkInOut) -> 'Species':
        species = cls.__new__(cls)
        species.genome = Genome.from_dict(data['genome'])
        species.specimens = [Specimen.from_dict(s, inout) for s in data.get('specimens', [])]
        species.first_index = 0
        species.last_index = 0
        return species

    def __repr__(self) -> str:
        return f"Species(members={len(self.specimens)}, genome={self.genome!r})"


# =============================================================================
# Mating and Mutation
# =============================================================================

def pick_change(
    mate_weight: int,
    add_node_weight: int,
    add_connection_weight: int,
    alter_connection_weight: int,
) -> str:
    """Weighted random pick of the kind of change to make."""
    weights = [mate_weight, add_node_weight, add_connection_weight, alter_connection_weight]
    if sum(weights) == 0:
        weights = [1, 1, 1, 1]

    pick = random.randrange(sum(weights))
    changes = [CHANGE_MATE, CHANGE_ADD_NODE, CHANGE_ADD_CONNECTION, CHANGE_ALTER_CONNECTION]
    threshold = 0
    for change, weight in zip(changes, weights):
        threshold += weight
        if pick < threshold:
            return change
    return CHANGE_ALTER_CONNECTION


def mate_mutate(
    specimen: Specimen,
    species_specimens: List[Specimen],
    specimen_index: int,
    config: MutateConfig,
    counter: InnovationCounter,
) -> Specimen:
    """
    Produce an unscored offspring from a specimen.

    Mating picks a partner from the same species and treats this specimen as
    the fitter parent; it is impossible in a single-member species. A failed
    add-connection falls back to a weight change.

    Args:
        specimen: Parent specimen
        species_specimens: All members of the parent's species
        specimen_index: Parent's index within species_specimens
        config: Mutation weights and limits
        counter: Source of gene ids

    Returns:
        New specimen with zero score and no outcomes
    """
    mate_weight = config.mate_weight
    mutate_weights = [config.add_node_weight, config.add_connection_weight, config.alter_connection_weight]
    if len(species_specimens) == 1:
        mate_weight = 0
        # The uniform fallback must not pick mating either
        if sum(mutate_weights) == 0:
            mutate_weights = [1, 1, 1]

    change = pick_change(mate_weight, *mutate_weights)

    if change == CHANGE_MATE:
        partner = _random_specimen_with_skip(species_specimens, specimen_index)
        network = mate(specimen.network, partner.network)
    elif change == CHANGE_ADD_NODE:
        network = specimen.network.clone()
        mutate_add_node(network, config.available_node_functions, counter)
    elif change == CHANGE_ADD_CONNECTION:
        network = specimen.network.clone()
        if not mutate_add_connection(network, config.max_add_connection_attempts, counter):
            mutate_change_weight(network)
    else:
        network = specimen.network.clone()
        mutate_change_weight(network)

    return Specimen(network=network)


def _random_specimen_with_skip(specimens: List[Specimen], skip_index: int) -> Specimen:
    index = random.randrange(len(specimens) - 1)
    if index >= skip_index:
        index += 1
    return specimens[index]


# =============================================================================
# Population
# =============================================================================

class Population:
    """
    The current generation's species.

    Example:
        population = Population(config.population, counter)
        population.add_network(new_network(inout, counter))
        population.fill_out()
        networks = population.dump_networks()
    """

    def __init__(self, config: PopulationConfig, counter: InnovationCounter):
        self.config = config
        self.counter = counter
        self.species: List[Species] = []

    @property
    def specimen_count(self) -> int:
        return sum(len(s) for s in self.species)

    def add_network(
        self,
        network: Network,
        score: float = 0.0,
        bonus: float = 0.0,
        outcomes: Optional[List[float]] = None,
    ) -> Specimen:
        """Wrap a scored network in a specimen and add it."""
        specimen = Specimen(network=network, score=score, bonus=bonus, outcomes=outcomes)
        self.add_specimen(specimen)
        return specimen

    def add_specimen(self, specimen: Specimen) -> None:
        """Place a specimen in the first compatible species, or found a new one."""
        for species in self.species:
            if species.try_add(specimen, self.config.speciation):
                return
        self.species.append(Species(specimen))

    def fill_out(self, target_size: Optional[int] = None) -> int:
        """
        Replenish the population by mating and mutating random specimens.

        Parents are drawn uniformly across the whole population, so larger
        species parent proportionally more offspring. Offspring are only
        speciated after all of them exist, keeping the index ranges stable.

        Args:
            target_size: Population size to reach (defaults to config)

        Returns:
            Number of specimens created
        """
        if target_size is None:
            target_size = self.config.population_size

        count = self._assign_index_ranges()
        needed = target_size - count
        if needed <= 0:
            return 0
        if count == 0:
            raise InvariantError("Cannot fill out an empty population.")

        offspring = []
        for _ in range(needed):
            specimen, species, local_index = self._random_specimen(count)
            offspring.append(
                mate_mutate(specimen, species.specimens, local_index, self.config.mutate, self.counter)
            )

        for specimen in offspring:
            self.add_specimen(specimen)
        return len(offspring)

    def _assign_index_ranges(self) -> int:
        next_index = 0
        for species in self.species:
            species.first_index = next_index
            species.last_index = next_index + len(species) - 1
            next_index += len(species)
        return next_index

    def _random_specimen(self, count: int) -> Tuple[Specimen, Species, int]:
        population_index = random.randrange(count)
        for species in self.species:
            found = species.pick(population_index)
            if found is not None:
                specimen, local_index = found
                return specimen, species, local_index
        raise InvariantError(f"Specimen not found for population index: {population_index}")

    def dump_specimens(self) -> List[Specimen]:
        """Remove and return every specimen; species themselves are kept."""
        specimens = []
        for species in self.species:
            specimens.extend(species.specimens)
            species.specimens = []
        return specimens

    def dump_networks(self) -> List[Network]:
        """Remove every specimen and return their networks for scoring."""
        return [s.network for s in self.dump_specimens()]

    def weight_species(self) -> None:
        """Stamp each specimen with its species' member count."""
        for species in self.species:
            species.weight()

    def add_all_specimens(self, specimens: List[Specimen]) -> None:
        """Re-add selected survivors, then drop species left empty."""
        for specimen in specimens:
            self.add_specimen(specimen)
        self.prune_empty_species()

    def prune_empty_species(self) -> None:
        """Remove species with no members, keeping the survivors' order."""
        self.species = [s for s in self.species if len(s) > 0]

    def to_dict(self) -> Dict[str, Any]:
        return {'species': [s.to_dict() for s in self.species]}

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        config: PopulationConfig,
        counter: InnovationCounter,
        inout: NetworkInOut,
    ) -> 'Population':
        population = cls(config, counter)
        population.species = [Species.from_dict(s, inout) for s in data.get('species', [])]
        return population

    def __repr__(self) -> str:
        return f"Population(species={len(self.species)}, specimens={self.specimen_count})"
