"""
A NEAT network: a fixed input/output interface plus an evolvable genome.

The compiled topology is cached and rebuilt on demand. Anything that edits
the genome must call invalidate() so the next evaluation recompiles.
"""

import random
from typing import List, Dict, Optional, Any

from .activations import get_activation
from .errors import InvariantError
from .genes import Genome
from .inout import NetworkInOut
from .topology import ComputeTopology, compile_topology


class Network:
    """
    Executable network built from a genome.

    Attributes:
        inout: Experiment inputs and outputs (shared, never mutated)
        genome: Gene list owned by this network
    """

    def __init__(self, inout: NetworkInOut, genome: Optional[Genome] = None):
        self.inout = inout
        self.genome = genome if genome is not None else Genome()
        self._topology: Optional[ComputeTopology] = None

    @property
    def topology(self) -> ComputeTopology:
        """Compiled plan, built on first use."""
        if self._topology is None:
            topology, ok = compile_topology(self.inout, self.genome.genes)
            if not ok:
                raise InvariantError(f"Network has a circular dependency in genome: {self.genome!r}")
            self._topology = topology
        return self._topology

    def invalidate(self) -> None:
        """Drop the cached topology after a genome edit."""
        self._topology = None

    def hidden_nodes(self) -> List[str]:
        """Names of enabled hidden nodes in gene order."""
        return [g.node_name for g in self.genome.enabled_node_genes()]

    def evaluate(self, inputs: Dict[str, float]) -> Dict[str, float]:
        """
        Propagate input values through the network.

        Args:
            inputs: Value for every declared input, keyed by name

        Returns:
            Value for every declared output, keyed by name
        """
        topology = self.topology
        count = topology.node_count

        for name in inputs:
            if not self.inout.is_input(name):
                raise InvariantError(f"Unknown input: '{name}'")

        values = [0.0] * count
        tally = [0] * count
        reached = [False] * count

        values[0] = 1.0  # bias
        reached[0] = True
        for name, handle in zip(self.inout.inputs, topology.input_handles):
            if name not in inputs:
                raise InvariantError(f"Missing input: '{name}'")
            values[handle] = float(inputs[name])
            reached[handle] = True

        for handle in topology.order:
            if tally[handle] != topology.fan_in[handle]:
                raise InvariantError(
                    f"Node '{topology.names[handle]}' received {tally[handle]} of "
                    f"{topology.fan_in[handle]} inputs"
                )
            value = values[handle]
            activation = topology.activations[handle]
            if activation:
                value = get_activation(activation)(value)
            values[handle] = value
            for sink, weight in topology.sinks[handle]:
                values[sink] += value * weight
                tally[sink] += 1
                reached[sink] = True

        outputs = {}
        for name, handle in zip(self.inout.outputs, topology.output_handles):
            if not reached[handle]:
                raise InvariantError(f"Output has no value: '{name}'")
            outputs[name] = values[handle]
        return outputs

    __call__ = evaluate

    def clone(self) -> 'Network':
        """Identical network with no shared gene storage."""
        return Network(self.inout, self.genome.clone())

    def randomized_clone(self) -> 'Network':
        """Clone with every enabled connection weight redrawn from [0, 1)."""
        clone = self.clone()
        for gene in clone.genome.genes:
            if gene.is_enabled_connection:
                gene.weight = random.random()
        return clone

    def to_dict(self) -> Dict[str, Any]:
        return {
            'inout': self.inout.to_dict(),
            'genome': self.genome.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], inout: Optional[NetworkInOut] = None) -> 'Network':
        """Restore a network, optionally sharing an existing in/out."""
        if inout is None:
            inout = NetworkInOut.from_dict(data['inout'])
        return cls(inout, Genome.from_dict(data['genome']))

    def __repr__(self) -> str:
        return (
            f"Network(inputs={self.inout.inputs}, outputs={self.inout.outputs}, "
            f"hidden={len(self.hidden_nodes())}, genome={self.genome!r})"
        )
