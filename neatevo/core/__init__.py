"""Core network model: genes, compilation, evaluation and activations."""

from .errors import InvariantError
from .genes import Gene, Genome, GENE_CONNECTION, GENE_NODE
from .inout import NetworkInOut, BIAS_NODE
from .topology import ComputeTopology, compile_topology
from .network import Network
from .activations import ACTIVATIONS, get_activation, activate

__all__ = [
    'InvariantError',
    'Gene',
    'Genome',
    'GENE_CONNECTION',
    'GENE_NODE',
    'NetworkInOut',
    'BIAS_NODE',
    'ComputeTopology',
    'compile_topology',
    'Network',
    'ACTIVATIONS',
    'get_activation',
    'activate',
]
