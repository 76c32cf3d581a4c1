"""
Tests for the core network model: activations, genes, in/out naming,
topology compilation and evaluation.

Run with: python -m pytest tests/test_core.py -v
"""

import math
import random

import pytest
import numpy as np
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from neatevo.core.activations import (
    ACTIVATIONS,
    ACTIVATION_FAMILIES,
    activate,
    get_activation,
    is_activation,
    list_activations,
    get_family_activations,
)
from neatevo.core.errors import InvariantError
from neatevo.core.genes import Gene, Genome, GENE_CONNECTION, GENE_NODE
from neatevo.core.inout import NetworkInOut, BIAS_NODE
from neatevo.core.topology import compile_topology
from neatevo.core.network import Network
from neatevo.evolution.innovation import InnovationCounter
from neatevo.evolution.operators import new_network, mutate_add_node, mutate_add_connection


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def inout():
    """Single input, single output."""
    return NetworkInOut(inputs=['i1'], outputs=['o1'])


@pytest.fixture
def bias_network(inout):
    """i1 -> o1 (0.1) plus b -> o1 (0.2)."""
    genome = Genome(genes=[
        Gene.connection(1, 'i1', 'o1', 0.1),
        Gene.connection(2, BIAS_NODE, 'o1', 0.2),
    ])
    return Network(inout, genome)


def chain_genes():
    """i1 -> 1 -> 2 -> 3 -> o1 with the bias also feeding o1."""
    return [
        Gene.node(1, ''),
        Gene.node(2, ''),
        Gene.node(3, ''),
        Gene.connection(4, 'i1', '1', 1.0),
        Gene.connection(5, '1', '2', 1.0),
        Gene.connection(6, '2', '3', 1.0),
        Gene.connection(7, '3', 'o1', 1.0),
        Gene.connection(8, BIAS_NODE, 'o1', 1.0),
    ]


# =============================================================================
# Activation Tests
# =============================================================================

class TestActivations:
    """Tests for the activation function library."""

    def test_all_registered(self):
        """Every family member is a registered activation."""
        assert len(ACTIVATIONS) == 11
        for family, names in ACTIVATION_FAMILIES.items():
            for name in names:
                assert name in ACTIVATIONS
                assert ACTIVATIONS[name].family == family

    def test_sigmoid(self):
        """Sigmoid saturates at 0.0 and 1.0 and centres on 0.5."""
        assert activate('sigmoid', -1e11) == 0.0
        assert activate('sigmoid', -101.0) == 0.0
        assert activate('sigmoid', 0.0) == 0.5
        assert activate('sigmoid', 100.0) == 1.0
        assert activate('sigmoid', 1e11) == 1.0

    def test_bipolar_sigmoid(self):
        """Bipolar sigmoid saturates at -1.0 and 1.0."""
        assert activate('bipolar_sigmoid', -1e11) == -1.0
        assert activate('bipolar_sigmoid', -101.0) == -1.0
        assert activate('bipolar_sigmoid', -100.0) == pytest.approx(-1.0)
        assert activate('bipolar_sigmoid', 0.0) == 0.0
        assert activate('bipolar_sigmoid', 100.0) == 1.0

    def test_gaussian(self):
        """Gaussian peaks at zero."""
        assert activate('gaussian', -100.0) == 0.0
        assert activate('gaussian', 0.0) == 1.0
        assert activate('gaussian', 100.0) == 0.0

    def test_inverse(self):
        assert activate('inverse', -100.0) == 100.0
        assert activate('inverse', 100.0) == -100.0

    def test_trigonometric(self):
        """Periodic functions pass through to the math library equivalents."""
        for x in (-100.0, 0.0, 100.0):
            assert activate('sine', x) == pytest.approx(math.sin(x))
            assert activate('cosine', x) == pytest.approx(math.cos(x))
            assert activate('tangent', x) == pytest.approx(math.tan(x))
            assert activate('hyperbolic_tangent', x) == pytest.approx(math.tanh(x))

    def test_ramp(self):
        """Ramp falls from 1.0 to -1.0 across each integer interval."""
        cases = {-1.0: 1.0, -0.75: 0.5, -0.5: 0.0, -0.25: -0.5, -0.1: -0.8,
                 0.0: 1.0, 0.25: 0.5, 0.5: 0.0, 0.75: -0.5}
        for x, expected in cases.items():
            assert activate('ramp', x) == pytest.approx(expected)

    def test_step(self):
        """Step alternates between 1.0 and -1.0 each integer interval."""
        cases = {-1.25: 1.0, -1.0: -1.0, -0.5: -1.0, -0.1: -1.0,
                 0.0: 1.0, 0.5: 1.0, 0.9: 1.0, 1.0: -1.0}
        for x, expected in cases.items():
            assert activate('step', x) == expected

    def test_spike(self):
        """Spike zigzags, turning on every integer."""
        cases = {-1.25: -0.5, -1.0: -1.0, -0.75: -0.5, -0.5: 0.0, -0.25: 0.5,
                 -0.1: 0.8, 0.0: 1.0, 0.25: 0.5, 0.5: 0.0, 0.9: -0.8, 1.0: -1.0, 1.25: -0.5}
        for x, expected in cases.items():
            assert activate('spike', x) == pytest.approx(expected)

    def test_array_input(self):
        """Activations also run element-wise over arrays."""
        out = activate('sigmoid', np.array([0.0, 0.0]))
        assert isinstance(out, np.ndarray)
        np.testing.assert_allclose(out, [0.5, 0.5])

    def test_hyphenated_names(self):
        assert get_activation('bipolar-sigmoid') is get_activation('bipolar_sigmoid')
        assert is_activation('hyperbolic-tangent')

    def test_unknown_activation(self):
        assert not is_activation('BOOGA')
        with pytest.raises(ValueError, match="Unknown activation 'BOOGA'"):
            activate('BOOGA', 0.0)

    def test_listing(self):
        listed = list_activations()
        assert listed['sine']['periodic'] is True
        assert get_family_activations('sawtooth') == ['ramp', 'step', 'spike']
        assert get_family_activations('nonexistent') == []


# =============================================================================
# Gene and Genome Tests
# =============================================================================

class TestGenes:
    """Tests for genes and genomes."""

    def test_connection_gene(self):
        gene = Gene.connection(3, 'i1', 'o1', 0.5)
        assert gene.kind == GENE_CONNECTION
        assert gene.is_enabled_connection
        assert not gene.is_node

    def test_node_gene_name(self):
        """Hidden nodes are named by their gene id."""
        gene = Gene.node(12, 'sigmoid')
        assert gene.kind == GENE_NODE
        assert gene.node_name == '12'
        assert gene.is_enabled_node

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            Gene(gene_id=1, enabled=True, kind='synapse')

    def test_gene_round_trip(self):
        gene = Gene.connection(3, 'i1', 'o1', 0.5, enabled=False)
        assert Gene.from_dict(gene.to_dict()) == gene

    def test_genome_queries(self):
        genome = Genome(genes=chain_genes())
        assert genome.is_sorted()
        assert genome.max_gene_id == 8
        assert genome.find_gene(6).from_node == '2'
        assert genome.find_gene(42) is None
        assert genome.has_enabled_edge('3', 'o1')
        assert not genome.has_enabled_edge('o1', '3')
        assert len(genome.enabled_node_genes()) == 3

    def test_empty_genome(self):
        genome = Genome()
        assert genome.max_gene_id == 0
        assert genome.is_sorted()

    def test_unsorted_genome(self):
        genome = Genome(genes=[Gene.connection(2, 'i1', 'o1', 1.0), Gene.connection(1, 'b', 'o1', 1.0)])
        assert not genome.is_sorted()

    def test_clone_is_independent(self):
        genome = Genome(genes=chain_genes())
        clone = genome.clone()
        clone.genes[3].weight = 9.0
        assert genome.genes[3].weight == 1.0

    def test_fingerprint(self):
        """Identical genomes share a fingerprint; any change alters it."""
        genome = Genome(genes=chain_genes())
        clone = genome.clone()
        assert genome.fingerprint() == clone.fingerprint()
        clone.genes[3].weight = 0.5
        assert genome.fingerprint() != clone.fingerprint()


# =============================================================================
# NetworkInOut Tests
# =============================================================================

class TestNetworkInOut:
    """Tests for input/output name validation."""

    def test_sorted(self):
        inout = NetworkInOut(inputs=['z', 'a'], outputs=['q', 'c'])
        assert inout.inputs == ['a', 'z']
        assert inout.outputs == ['c', 'q']
        assert inout.is_source(BIAS_NODE)
        assert inout.is_source('a')
        assert not inout.is_source('c')

    @pytest.mark.parametrize('inputs,outputs', [
        ([], ['o1']),
        (['i1'], []),
        (['x'], ['x']),
        (['i1', 'i1'], ['o1']),
        (['b'], ['o1']),
        (['i1'], ['b']),
        (['12'], ['o1']),
        (['i1'], ['7']),
    ])
    def test_invalid(self, inputs, outputs):
        with pytest.raises(InvariantError):
            NetworkInOut(inputs=inputs, outputs=outputs)

    def test_round_trip(self, inout):
        assert NetworkInOut.from_dict(inout.to_dict()) == inout


# =============================================================================
# Topology Compiler Tests
# =============================================================================

class TestCompileTopology:
    """Tests for ordering and validating gene lists."""

    def test_bias_order(self, inout, bias_network):
        topology, ok = compile_topology(inout, bias_network.genome.genes)
        assert ok
        assert topology.ordered_nodes == ['b', 'i1', 'o1']
        assert topology.fan_in_of('o1') == 2
        assert topology.sink_weights('i1') == {'o1': 0.1}

    def test_chain_order(self, inout):
        topology, ok = compile_topology(inout, chain_genes())
        assert ok
        assert topology.ordered_nodes == ['b', 'i1', '1', '2', '3', 'o1']

    def test_disabled_genes_ignored(self, inout):
        genes = chain_genes()
        genes.append(Gene.connection(9, 'i1', 'o1', 1.0, enabled=False))
        topology, ok = compile_topology(inout, genes)
        assert ok
        assert topology.fan_in_of('o1') == 2

    def test_self_loop_not_ok(self, inout):
        genes = chain_genes() + [Gene.connection(9, '1', '1', 1.0)]
        _, ok = compile_topology(inout, genes)
        assert not ok

    def test_cycle_not_ok(self, inout):
        genes = chain_genes() + [Gene.connection(9, '3', '1', 1.0)]
        _, ok = compile_topology(inout, genes)
        assert not ok

    def test_duplicate_edge(self, inout):
        genes = chain_genes() + [Gene.connection(9, '1', '2', 0.3)]
        with pytest.raises(InvariantError, match="Connection made twice from node '1' to node: '2'"):
            compile_topology(inout, genes)

    def test_unknown_nodes(self, inout):
        with pytest.raises(InvariantError, match="Unknown from node: 'unknown'"):
            compile_topology(inout, [Gene.connection(1, 'unknown', 'o1', 1.0)])
        with pytest.raises(InvariantError, match="Unknown to node: 'unknown'"):
            compile_topology(inout, [Gene.connection(1, 'i1', 'unknown', 1.0)])

    def test_input_as_sink(self, inout):
        genes = [Gene.connection(1, 'b', 'o1', 1.0), Gene.connection(2, 'b', 'i1', 1.0)]
        with pytest.raises(InvariantError, match="Cannot use bias or input as sink"):
            compile_topology(inout, genes)

    def test_unconnected_output(self):
        inout = NetworkInOut(inputs=['i1'], outputs=['o1', 'o2'])
        with pytest.raises(InvariantError, match="Output has no connections: 'o2'"):
            compile_topology(inout, [Gene.connection(1, 'i1', 'o1', 1.0)])


# =============================================================================
# Network Evaluation Tests
# =============================================================================

class TestNetworkEvaluate:
    """Tests for forward propagation."""

    def test_bias_contributes(self, bias_network):
        outputs = bias_network.evaluate({'i1': 10.0})
        assert outputs['o1'] == pytest.approx(1.2)

    def test_callable(self, bias_network):
        assert bias_network({'i1': 0.0})['o1'] == pytest.approx(0.2)

    def test_hidden_activation(self, inout):
        genome = Genome(genes=[
            Gene.node(1, 'sigmoid'),
            Gene.connection(2, 'i1', '1', 1.0),
            Gene.connection(3, '1', 'o1', 0.5),
        ])
        network = Network(inout, genome)
        assert network.hidden_nodes() == ['1']
        assert network.evaluate({'i1': 0.0})['o1'] == pytest.approx(0.25)

    def test_chain(self, inout):
        network = Network(inout, Genome(genes=chain_genes()))
        assert network.evaluate({'i1': 2.0})['o1'] == pytest.approx(3.0)

    def test_missing_input(self, bias_network):
        with pytest.raises(InvariantError, match="Missing input: 'i1'"):
            bias_network.evaluate({})

    def test_unknown_input(self, bias_network):
        with pytest.raises(InvariantError, match="Unknown input: 'i2'"):
            bias_network.evaluate({'i1': 1.0, 'i2': 1.0})

    def test_cycle_rejected(self, inout):
        genes = chain_genes() + [Gene.connection(9, '3', '1', 1.0)]
        network = Network(inout, Genome(genes=genes))
        with pytest.raises(InvariantError, match="circular dependency"):
            network.evaluate({'i1': 1.0})

    def test_invalidate_recompiles(self, bias_network):
        bias_network.evaluate({'i1': 1.0})
        bias_network.genome.genes[0].weight = 1.0
        bias_network.invalidate()
        assert bias_network.evaluate({'i1': 1.0})['o1'] == pytest.approx(1.2)

    def test_randomized_clone(self, bias_network):
        clone = bias_network.randomized_clone()
        assert clone.genome.gene_ids == bias_network.genome.gene_ids
        assert clone.genome is not bias_network.genome
        for gene in clone.genome:
            assert 0.0 <= gene.weight < 1.0

    def test_round_trip(self, bias_network):
        restored = Network.from_dict(bias_network.to_dict())
        assert restored.evaluate({'i1': 10.0})['o1'] == pytest.approx(1.2)


# =============================================================================
# Acyclicity Tests
# =============================================================================

def has_cycle(topology):
    """Depth-first walk over sink edges, tracking the current path."""
    on_path = [False] * topology.node_count
    done = [False] * topology.node_count

    def visit(handle):
        if on_path[handle]:
            return True
        if done[handle]:
            return False
        on_path[handle] = True
        for sink, _ in topology.sinks[handle]:
            if visit(sink):
                return True
        on_path[handle] = False
        done[handle] = True
        return False

    return any(visit(h) for h in range(topology.node_count))


class TestAcyclicity:
    """Grown networks always compile to cycle-free plans."""

    @pytest.mark.parametrize('seed', range(5))
    def test_grown_networks_have_no_cycles(self, seed):
        random.seed(seed)
        counter = InnovationCounter()
        inout = NetworkInOut(inputs=['i1', 'i2'], outputs=['o1', 'o2'])
        network = new_network(inout, counter)

        for step in range(40):
            if step % 3 == 0:
                mutate_add_node(network, ['sigmoid', 'gaussian'], counter)
            else:
                mutate_add_connection(network, 10, counter)

            topology, ok = compile_topology(inout, network.genome.genes)
            assert ok
            assert len(topology.order) == topology.node_count
            assert not has_cycle(topology)

        network.evaluate({'i1': 0.5, 'i2': -0.5})

    def test_cycle_detected_by_walk(self):
        """The walk itself flags a genome the compiler rejects."""
        inout = NetworkInOut(inputs=['i1'], outputs=['o1'])
        genes = [
            Gene.node(1, ''),
            Gene.node(2, ''),
            Gene.connection(3, 'i1', 'o1', 1.0),
            Gene.connection(4, '1', '2', 1.0),
            Gene.connection(5, '2', '1', 1.0),
        ]
        topology, ok = compile_topology(inout, genes)
        assert not ok
        assert len(topology.order) < topology.node_count
        assert has_cycle(topology)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
