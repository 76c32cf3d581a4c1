"""
Compiles a gene list into an ordered, cycle-free evaluation plan.

Nodes are held in an arena indexed by small integer handles. Names are only
resolved at the boundary (bias, declared inputs and outputs, hidden node
genes); every edge inside the plan refers to handles.

The compiler doubles as the validity oracle for mutations: a tentative gene
list that would introduce a cycle compiles with ok=False instead of raising.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional, Tuple, Iterable

from .errors import InvariantError
from .genes import Gene
from .inout import NetworkInOut, BIAS_NODE


@dataclass
class ComputeTopology:
    """
    Compiled evaluation plan for one genome.

    Attributes:
        names: Node name per handle
        handles: Node name to handle lookup
        fan_in: Number of incoming edges per handle
        sinks: Outgoing (sink handle, weight) edges per handle, in gene order
        activations: Activation function name per handle, None for identity
        order: Handles in evaluation order
        input_handles: Handles of the declared inputs, sorted by name
        output_handles: Handles of the declared outputs, sorted by name
    """
    names: List[str] = field(default_factory=list)
    handles: Dict[str, int] = field(default_factory=dict)
    fan_in: List[int] = field(default_factory=list)
    sinks: List[List[Tuple[int, float]]] = field(default_factory=list)
    activations: List[Optional[str]] = field(default_factory=list)
    order: List[int] = field(default_factory=list)
    input_handles: List[int] = field(default_factory=list)
    output_handles: List[int] = field(default_factory=list)

    @property
    def node_count(self) -> int:
        return len(self.names)

    @property
    def ordered_nodes(self) -> List[str]:
        """Evaluation order as node names."""
        return [self.names[h] for h in self.order]

    def add_node(self, name: str, activation: Optional[str] = None) -> int:
        if name in self.handles:
            raise InvariantError(f"Node defined twice: '{name}'")
        handle = len(self.names)
        self.names.append(name)
        self.handles[name] = handle
        self.fan_in.append(0)
        self.sinks.append([])
        self.activations.append(activation)
        return handle

    def sink_weights(self, name: str) -> Dict[str, float]:
        """Outgoing edges of a node as {sink name: weight}."""
        return {self.names[s]: w for s, w in self.sinks[self.handles[name]]}

    def fan_in_of(self, name: str) -> int:
        return self.fan_in[self.handles[name]]

    def activation_of(self, name: str) -> Optional[str]:
        return self.activations[self.handles[name]]


def compile_topology(
    inout: NetworkInOut,
    genes: Iterable[Gene],
) -> Tuple[ComputeTopology, bool]:
    """
    Build the evaluation plan for a gene list.

    Args:
        inout: Validated experiment inputs and outputs
        genes: Candidate genes; disabled genes are ignored

    Returns:
        Tuple of (topology, ok). ok is False when the enabled connections
        contain a cycle, in which case the order is incomplete.

    Raises:
        InvariantError: on unknown endpoints, duplicate edges, edges into the
            bias or an input, or a declared output with nothing wired to it
    """
    genes = list(genes)
    topology = ComputeTopology()

    topology.add_node(BIAS_NODE)
    topology.input_handles = [topology.add_node(name) for name in inout.inputs]
    topology.output_handles = [topology.add_node(name) for name in inout.outputs]
    for gene in genes:
        if gene.is_enabled_node:
            topology.add_node(gene.node_name, gene.activation or None)

    source_count = 1 + len(inout.inputs)

    for gene in genes:
        if not gene.is_enabled_connection:
            continue
        source = topology.handles.get(gene.from_node)
        if source is None:
            raise InvariantError(f"Unknown from node: '{gene.from_node}'")
        sink = topology.handles.get(gene.to_node)
        if sink is None:
            raise InvariantError(f"Unknown to node: '{gene.to_node}'")
        if sink < source_count:
            raise InvariantError(f"Cannot use bias or input as sink: '{gene.to_node}'")
        if any(existing == sink for existing, _ in topology.sinks[source]):
            raise InvariantError(
                f"Connection made twice from node '{gene.from_node}' to node: '{gene.to_node}'"
            )
        topology.sinks[source].append((sink, gene.weight))
        topology.fan_in[sink] += 1

    for handle in topology.output_handles:
        if topology.fan_in[handle] == 0:
            raise InvariantError(f"Output has no connections: '{topology.names[handle]}'")

    # Kahn-style sweep: a sink joins the order once every source has fed it
    order = list(range(source_count))
    tally = [0] * topology.node_count
    position = 0
    while position < len(order):
        for sink, _ in topology.sinks[order[position]]:
            tally[sink] += 1
            if tally[sink] == topology.fan_in[sink]:
                order.append(sink)
        position += 1

    topology.order = order
    return topology, len(order) == topology.node_count
