"""
Evolutionary operators: structural mutation, crossover, and selection.

These operators drive the evolutionary search by:
- Growing network structure (new connections, new hidden nodes)
- Perturbing connection weights
- Combining parent genomes through crossover
- Selecting which ranked specimens survive to the next generation

Structural mutations reject invalid edits (cycles, duplicate edges) by
returning False. Misuse, such as wiring into an input, raises InvariantError.
"""

import random
from dataclasses import dataclass
from typing import List, TYPE_CHECKING

from ..core.errors import InvariantError
from ..core.genes import Gene, Genome
from ..core.inout import NetworkInOut, BIAS_NODE
from ..core.network import Network
from ..core.topology import compile_topology
from .innovation import InnovationCounter

if TYPE_CHECKING:
    from .population import Specimen


# =============================================================================
# Network Creation
# =============================================================================

def new_network(inout: NetworkInOut, counter: InnovationCounter) -> Network:
    """
    Create a minimal well-formed network.

    Every output is wired to one randomly chosen input with a random weight,
    so all outputs can produce a value.

    Args:
        inout: Experiment inputs and outputs
        counter: Source of gene ids

    Returns:
        A new network with one connection per output
    """
    network = Network(inout)
    for out in inout.outputs:
        source = random.choice(inout.inputs)
        if not add_connection(network, source, out, random.random(), counter):
            raise InvariantError(
                f"Failed to create connection from '{source}' to '{out}' for a new network"
            )
    return network


# =============================================================================
# Mutation Operators
# =============================================================================

def add_connection(
    network: Network,
    from_node: str,
    to_node: str,
    weight: float,
    counter: InnovationCounter,
) -> bool:
    """
    Add a connection gene between two existing nodes.

    The gene is tested against the compiler before an id is allocated, so a
    rejected connection consumes no innovation number.

    Args:
        network: Network to modify
        from_node: Source node name (bias, input or hidden)
        to_node: Sink node name (output or hidden)
        weight: Connection weight
        counter: Source of gene ids

    Returns:
        True if the connection was added, False if it would duplicate an
        existing edge or introduce a cycle
    """
    if from_node == to_node:
        return False

    for gene in network.genome.genes:
        if not gene.is_enabled_connection:
            continue
        if gene.from_node == from_node and gene.to_node == to_node:
            return False
        # The reverse edge is the cheapest cycle to detect
        if gene.from_node == to_node and gene.to_node == from_node:
            return False

    inout = network.inout
    if to_node == BIAS_NODE:
        raise InvariantError(f"Cannot use bias as sink: '{to_node}'")
    if inout.is_input(to_node):
        raise InvariantError(f"Cannot use input as sink: '{to_node}'")
    if inout.is_output(from_node):
        raise InvariantError(f"Cannot use output as source: '{from_node}'")

    candidate = Gene.connection(0, from_node, to_node, weight)

    # Source-to-output wiring can never close a cycle
    if not (inout.is_source(from_node) and inout.is_output(to_node)):
        _, ok = compile_topology(inout, network.genome.genes + [candidate])
        if not ok:
            return False

    candidate.gene_id = counter.next_id()
    network.genome.append(candidate)
    network.invalidate()
    return True


def add_node(
    network: Network,
    gene_index: int,
    activation: str,
    counter: InnovationCounter,
) -> None:
    """
    Split an enabled connection with a new hidden node.

    The original connection is disabled and replaced by a node gene plus two
    connections (source -> node, node -> sink) that both keep the original
    weight.

    Args:
        network: Network to modify
        gene_index: Index of the connection gene to split
        activation: Activation function of the new node
        counter: Source of gene ids
    """
    original = network.genome.genes[gene_index]
    if not original.enabled:
        raise InvariantError("Disabled genes cannot be split with a new node.")
    if not original.is_connection:
        raise InvariantError(
            f"Only connection genes can have nodes added, not type: '{original.kind}'"
        )

    original.enabled = False

    node_gene = Gene.node(counter.next_id(), activation)
    network.genome.append(node_gene)
    network.genome.append(
        Gene.connection(counter.next_id(), original.from_node, node_gene.node_name, original.weight)
    )
    network.genome.append(
        Gene.connection(counter.next_id(), node_gene.node_name, original.to_node, original.weight)
    )
    network.invalidate()


def _random_enabled_connection(network: Network) -> int:
    indexes = network.genome.enabled_connection_indexes()
    if not indexes:
        raise InvariantError("Network has no enabled connections.")
    return random.choice(indexes)


def mutate_add_node(
    network: Network,
    available_functions: List[str],
    counter: InnovationCounter,
) -> None:
    """Split a random enabled connection with a node using a random activation."""
    if not available_functions:
        raise InvariantError("Available functions must be defined to mutate add node.")
    activation = random.choice(available_functions)
    add_node(network, _random_enabled_connection(network), activation, counter)


def mutate_add_connection(
    network: Network,
    max_attempts: int,
    counter: InnovationCounter,
) -> bool:
    """
    Try to wire two random nodes together.

    Sources are drawn from bias, inputs and hidden nodes; sinks from outputs
    and hidden nodes.

    Args:
        network: Network to modify
        max_attempts: How many random pairs to try before giving up
        counter: Source of gene ids

    Returns:
        True if a connection was added within max_attempts
    """
    if max_attempts < 1:
        raise InvariantError(
            f"Must have 1 or more max attempts to mutate add connection, not: {max_attempts}"
        )

    hidden = network.hidden_nodes()
    from_nodes = [BIAS_NODE] + network.inout.inputs + hidden
    to_nodes = network.inout.outputs + hidden

    for _ in range(max_attempts):
        from_node = random.choice(from_nodes)
        to_node = random.choice(to_nodes)
        if add_connection(network, from_node, to_node, random.random(), counter):
            return True
    return False


def mutate_change_weight(network: Network) -> None:
    """Redraw the weight of one random enabled connection from [0, 1)."""
    index = _random_enabled_connection(network)
    network.genome.genes[index].weight = random.random()
    network.invalidate()


# =============================================================================
# Crossover Operators
# =============================================================================

def mate(fitter: Network, other: Network) -> Network:
    """
    Create a child from two parents.

    The child's structure is the fitter parent's genome, gene for gene. For
    every enabled connection the other parent also carries (same gene id),
    a fair coin decides whose weight the child keeps. Genes unique to the
    other parent are never inherited.

    Args:
        fitter: Parent whose structure is inherited
        other: Parent that may contribute weights

    Returns:
        New child network
    """
    if not fitter.genome.is_sorted():
        raise InvariantError(f"Genome not sorted correctly by gene id: {fitter.genome.gene_ids}")
    if not other.genome.is_sorted():
        raise InvariantError(f"Genome not sorted correctly by gene id: {other.genome.gene_ids}")

    child_genes = []
    for gene in fitter.genome.genes:
        child_gene = gene.copy()
        if child_gene.is_enabled_connection:
            shared = other.genome.find_gene(child_gene.gene_id)
            if shared is not None and random.randrange(2) == 0:
                child_gene.weight = shared.weight
        child_genes.append(child_gene)

    return Network(fitter.inout, Genome(genes=child_genes))


# =============================================================================
# Selection Operators
# =============================================================================

@dataclass
class TruncateSelector:
    """Keep the first keep_count specimens of an already sorted list."""
    keep_count: int

    def __post_init__(self):
        if self.keep_count < 1:
            raise ValueError(f"keep_count must be one or more: {self.keep_count}")

    def select(self, specimens: List['Specimen']) -> List['Specimen']:
        return specimens[:self.keep_count]


@dataclass
class TournamentSelector:
    """
    Run competitions among random specimens until keep_count winners exist.

    Each tournament draws `contenders` distinct specimens from those not yet
    kept; the highest selection score wins and leaves the pool. If
    `contenders` covers the whole pool this degenerates into truncation.
    """
    keep_count: int
    contenders: int

    def __post_init__(self):
        if self.keep_count < 1:
            raise ValueError(f"keep_count must be one or more: {self.keep_count}")
        if self.contenders < 2:
            raise ValueError(f"contenders must be two or more: {self.contenders}")

    def select(self, specimens: List['Specimen']) -> List['Specimen']:
        if self.keep_count >= len(specimens):
            return list(specimens)
        return tournament_selection(specimens, self.keep_count, self.contenders)


def tournament_selection(
    specimens: List['Specimen'],
    n_select: int,
    tournament_size: int = 3,
) -> List['Specimen']:
    """
    Tournament selection without replacement.

    Args:
        specimens: Scored specimens, in any order
        n_select: Number of specimens to keep
        tournament_size: Specimens competing in each tournament

    Returns:
        Winners in the order they were picked
    """
    pool = list(range(len(specimens)))
    keepers = []

    while len(keepers) < n_select and pool:
        size = min(tournament_size, len(pool))
        contestants = random.sample(pool, size)

        # Strictly better replaces; ties keep the earlier draw
        best = contestants[0]
        for index in contestants[1:]:
            if specimens[index].selection_score > specimens[best].selection_score:
                best = index

        keepers.append(best)
        pool.remove(best)

    return [specimens[i] for i in keepers]
