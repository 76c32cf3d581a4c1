"""
Named inputs and outputs shared by every network in an experiment.

Node names live in three disjoint namespaces:
- The bias node, always named 'b' with a constant value of 1.0
- Declared inputs and outputs chosen by the experiment
- Hidden nodes, named by the decimal id of their node gene

Declared names are rejected if they would collide with the other two.
"""

from dataclasses import dataclass
from typing import List, Dict, Any

from .errors import InvariantError

BIAS_NODE = 'b'


def _is_unsigned_int(name: str) -> bool:
    # Mirrors what a hidden node name looks like: plain decimal digits
    return name.isascii() and name.isdigit()


@dataclass
class NetworkInOut:
    """
    Inputs and outputs of the networks in one experiment.

    Both lists are validated and stored sorted.
    """
    inputs: List[str]
    outputs: List[str]

    def __post_init__(self):
        if not self.inputs:
            raise InvariantError("NetworkInOut has no inputs.")
        if not self.outputs:
            raise InvariantError("NetworkInOut has no outputs.")

        self.inputs = sorted(self.inputs)
        self.outputs = sorted(self.outputs)

        overlap = set(self.inputs) & set(self.outputs)
        if overlap:
            raise InvariantError(
                f"NetworkInOut has both input and output named '{sorted(overlap)[0]}'"
            )
        if len(set(self.inputs)) != len(self.inputs) or len(set(self.outputs)) != len(self.outputs):
            raise InvariantError("NetworkInOut has duplicate names.")
        if BIAS_NODE in self.inputs:
            raise InvariantError(f"NetworkInOut has input named same as the bias '{BIAS_NODE}'")
        if BIAS_NODE in self.outputs:
            raise InvariantError(f"NetworkInOut has output named same as the bias '{BIAS_NODE}'")
        for name in self.inputs:
            if _is_unsigned_int(name):
                raise InvariantError(
                    f"NetworkInOut has input named as a number '{name}'. Used for hidden nodes."
                )
        for name in self.outputs:
            if _is_unsigned_int(name):
                raise InvariantError(
                    f"NetworkInOut has output named as a number '{name}'. Used for hidden nodes."
                )

    def is_input(self, name: str) -> bool:
        return name in self.inputs

    def is_output(self, name: str) -> bool:
        return name in self.outputs

    def is_source(self, name: str) -> bool:
        """Bias or declared input."""
        return name == BIAS_NODE or name in self.inputs

    def to_dict(self) -> Dict[str, Any]:
        return {'inputs': list(self.inputs), 'outputs': list(self.outputs)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'NetworkInOut':
        return cls(inputs=list(data['inputs']), outputs=list(data['outputs']))
