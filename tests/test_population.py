"""
Tests for species, specimens and population management.

Run with: python -m pytest tests/test_population.py -v
"""

import random

import pytest
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from neatevo.core.errors import InvariantError
from neatevo.core.genes import Gene, Genome
from neatevo.core.inout import NetworkInOut
from neatevo.core.network import Network
from neatevo.evolution.config import PopulationConfig, SpeciationConfig, MutateConfig
from neatevo.evolution.innovation import InnovationCounter
from neatevo.evolution.operators import new_network
from neatevo.evolution.population import (
    Specimen,
    Species,
    Population,
    pick_change,
    mate_mutate,
    CHANGE_MATE,
    CHANGE_ADD_NODE,
    CHANGE_ADD_CONNECTION,
    CHANGE_ALTER_CONNECTION,
)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def inout():
    return NetworkInOut(inputs=['i1', 'i2'], outputs=['o1'])


@pytest.fixture
def strict_config():
    """One extra gene in the younger genome splits species."""
    return PopulationConfig(
        population_size=10,
        speciation=SpeciationConfig(threshold=0.5, c1=1.0, c2=0.0, c3=0.0),
    )


def genome_a():
    return Genome(genes=[Gene.connection(1, 'i1', 'o1', 0.2)])


def genome_b():
    return Genome(genes=[Gene.connection(2, 'i2', 'o1', 0.4)])


def empty_species(inout, genome):
    species = Species(Specimen(network=Network(inout, genome)))
    species.specimens = []
    return species


# =============================================================================
# Species Placement Tests
# =============================================================================

class TestAddSpecimen:
    """Tests for placing specimens into species."""

    def test_first_specimen_founds_species(self, inout, strict_config):
        population = Population(strict_config, InnovationCounter())
        specimen = population.add_network(Network(inout, genome_a()), 10.0, 100.0, [1.0, 2.0])

        assert len(population.species) == 1
        species = population.species[0]
        assert species.genome == genome_a()
        assert species.specimens == [specimen]
        assert specimen.score == 10.0
        assert specimen.bonus == 100.0
        assert specimen.outcomes == [1.0, 2.0]

    def test_representative_is_a_copy(self, inout, strict_config):
        population = Population(strict_config, InnovationCounter())
        network = Network(inout, genome_a())
        population.add_network(network)
        network.genome.genes[0].weight = 5.0
        assert population.species[0].genome.genes[0].weight == 0.2

    def test_first_matching_species_wins(self, inout, strict_config):
        population = Population(strict_config, InnovationCounter())
        population.species = [
            empty_species(inout, genome_b()),
            empty_species(inout, genome_a()),
            empty_species(inout, genome_a()),
        ]
        population.add_network(Network(inout, genome_a()))

        assert [len(s) for s in population.species] == [0, 1, 0]

    def test_no_matching_species(self, inout, strict_config):
        population = Population(strict_config, InnovationCounter())
        population.species = [empty_species(inout, genome_b())]
        population.add_network(Network(inout, genome_a()))

        assert [len(s) for s in population.species] == [0, 1]
        assert population.species[1].genome == genome_a()

    def test_distance_recorded(self, inout):
        config = PopulationConfig(speciation=SpeciationConfig(threshold=2.0, c1=1.0, c2=0.0, c3=0.0))
        population = Population(config, InnovationCounter())
        population.add_network(Network(inout, genome_a()))
        specimen = population.add_network(Network(inout, genome_b()))
        assert len(population.species) == 1
        assert specimen.speciation_distance == pytest.approx(1.0)


# =============================================================================
# Species Tests
# =============================================================================

class TestSpecies:
    """Tests for species index ranges and weighting."""

    def test_pick_by_population_index(self, inout):
        species = Species(Specimen(network=Network(inout, genome_a())))
        species.specimens.append(Specimen(network=Network(inout, genome_a())))
        species.first_index = 4
        species.last_index = 5

        assert species.pick(3) is None
        specimen, local = species.pick(5)
        assert local == 1
        assert specimen is species.specimens[1]
        assert species.pick(6) is None

    def test_weight(self, inout):
        species = Species(Specimen(network=Network(inout, genome_a())))
        species.specimens.append(Specimen(network=Network(inout, genome_a())))
        species.weight()
        assert [s.species_member_count for s in species.specimens] == [2, 2]


# =============================================================================
# Mate / Mutate Tests
# =============================================================================

class TestMateMutate:
    """Tests for producing offspring."""

    def test_pick_single_choice(self):
        for _ in range(20):
            assert pick_change(0, 1, 0, 0) == CHANGE_ADD_NODE
            assert pick_change(0, 0, 0, 3) == CHANGE_ALTER_CONNECTION

    def test_pick_uniform_when_all_zero(self):
        random.seed(7)
        picks = {pick_change(0, 0, 0, 0) for _ in range(200)}
        assert picks == {CHANGE_MATE, CHANGE_ADD_NODE, CHANGE_ADD_CONNECTION, CHANGE_ALTER_CONNECTION}

    def test_pick_weighted_bounds(self, monkeypatch):
        """Weights 1, 2, 3, 4 split ten draws into contiguous bands."""
        expected = [CHANGE_MATE] + [CHANGE_ADD_NODE] * 2 + [CHANGE_ADD_CONNECTION] * 3 + [CHANGE_ALTER_CONNECTION] * 4
        for draw, change in enumerate(expected):
            monkeypatch.setattr(random, 'randrange', lambda n, d=draw: d)
            assert pick_change(1, 2, 3, 4) == change

    def test_offspring_unscored(self, inout):
        counter = InnovationCounter()
        parent = Specimen(network=new_network(inout, counter), score=5.0, bonus=2.0, outcomes=[1.0])
        child = mate_mutate(parent, [parent], 0, MutateConfig(), counter)

        assert child.network is not parent.network
        assert child.score == 0.0
        assert child.bonus == 0.0
        assert child.outcomes is None

    def test_lone_specimen_never_mates(self, inout):
        """Mating needs a partner, so a single-member species always mutates."""
        counter = InnovationCounter()
        parent = Specimen(network=new_network(inout, counter))
        config = MutateConfig(mate_weight=1, add_node_weight=0, add_connection_weight=0, alter_connection_weight=0)

        for _ in range(20):
            child = mate_mutate(parent, [parent], 0, config, counter)
            assert child.network is not parent.network
            assert child.network.genome.is_sorted()

    def test_add_node_offspring(self, inout):
        counter = InnovationCounter()
        parent = Specimen(network=new_network(inout, counter))
        config = MutateConfig(
            available_node_functions=['gaussian'],
            mate_weight=0, add_node_weight=1, add_connection_weight=0, alter_connection_weight=0,
        )
        child = mate_mutate(parent, [parent], 0, config, counter)
        assert child.network.hidden_nodes() == ['2']
        assert len(parent.network.genome) == 1

    def test_mate_picks_other_member(self, inout):
        counter = InnovationCounter()
        first = Specimen(network=new_network(inout, counter))
        second = Specimen(network=first.network.clone())
        config = MutateConfig(mate_weight=1, add_node_weight=0, add_connection_weight=0, alter_connection_weight=0)

        child = mate_mutate(first, [first, second], 0, config, counter)
        assert child.network.genome.gene_ids == first.network.genome.gene_ids


# =============================================================================
# Population Tests
# =============================================================================

class TestPopulation:
    """Tests for generation bookkeeping."""

    def test_fill_out(self, inout, strict_config):
        random.seed(11)
        counter = InnovationCounter()
        population = Population(strict_config, counter)
        population.add_network(new_network(inout, counter))

        created = population.fill_out()

        assert created == 9
        assert population.specimen_count == 10
        for network in population.dump_networks():
            network.evaluate({'i1': 0.5, 'i2': 0.5})

    def test_fill_out_already_full(self, inout):
        counter = InnovationCounter()
        population = Population(PopulationConfig(population_size=2), counter)
        population.add_network(new_network(inout, counter))
        population.add_network(new_network(inout, counter))
        assert population.fill_out() == 0
        assert population.fill_out(target_size=1) == 0

    def test_fill_out_empty(self, strict_config):
        population = Population(strict_config, InnovationCounter())
        with pytest.raises(InvariantError, match="empty population"):
            population.fill_out()

    def test_dump_keeps_species(self, inout, strict_config):
        population = Population(strict_config, InnovationCounter())
        population.add_network(Network(inout, genome_a()))
        population.add_network(Network(inout, genome_b()))

        specimens = population.dump_specimens()
        assert len(specimens) == 2
        assert len(population.species) == 2
        assert population.specimen_count == 0

    def test_add_all_prunes_empty(self, inout, strict_config):
        population = Population(strict_config, InnovationCounter())
        population.add_network(Network(inout, genome_a()))
        population.add_network(Network(inout, genome_b()))
        specimens = population.dump_specimens()

        population.add_all_specimens(specimens[1:])

        assert len(population.species) == 1
        assert population.species[0].genome == genome_b()

    def test_weight_species(self, inout, strict_config):
        population = Population(strict_config, InnovationCounter())
        population.add_network(Network(inout, genome_a()))
        population.add_network(Network(inout, genome_a()))
        population.add_network(Network(inout, genome_b()))
        population.weight_species()

        counts = [s.species_member_count for s in population.dump_specimens()]
        assert counts == [2, 2, 1]

    def test_round_trip(self, inout, strict_config):
        population = Population(strict_config, InnovationCounter())
        population.add_network(Network(inout, genome_a()), 3.0, 1.0, [0.5])
        population.add_network(Network(inout, genome_b()), 4.0)

        restored = Population.from_dict(population.to_dict(), strict_config, InnovationCounter(), inout)

        assert len(restored.species) == 2
        assert restored.species[0].specimens[0].score == 3.0
        assert restored.species[0].specimens[0].outcomes == [0.5]
        assert restored.species[1].genome == genome_b()


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
