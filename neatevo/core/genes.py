"""
Gene and genome representation for NEAT networks.

A Genome is an ordered list of Genes, always sorted ascending by gene id
(the innovation number). Two kinds of gene exist:
- Connection genes: a weighted edge between two named nodes
- Node genes: a hidden node, named by the decimal string of its own id

Genes are never removed. Splitting a connection disables it instead, so the
ancestry of every genome stays comparable for crossover and speciation.
"""

from dataclasses import dataclass, field, asdict
from typing import List, Dict, Optional, Any
import bisect
import hashlib
import json

GENE_CONNECTION = 'connection'
GENE_NODE = 'node'
GENE_KINDS = (GENE_CONNECTION, GENE_NODE)


@dataclass
class Gene:
    """
    A single heritable unit of network structure.

    Attributes:
        gene_id: Innovation number, unique within an experiment
        enabled: Disabled genes are kept to preserve ancestry
        kind: GENE_CONNECTION or GENE_NODE
        from_node: Source node name (connections only)
        to_node: Sink node name (connections only)
        weight: Connection weight (connections only)
        activation: Activation function name (nodes only)
    """
    gene_id: int
    enabled: bool
    kind: str
    from_node: str = ''
    to_node: str = ''
    weight: float = 0.0
    activation: str = ''

    def __post_init__(self):
        if self.kind not in GENE_KINDS:
            raise ValueError(f"Unknown gene kind: {self.kind}")

    @classmethod
    def connection(
        cls,
        gene_id: int,
        from_node: str,
        to_node: str,
        weight: float,
        enabled: bool = True,
    ) -> 'Gene':
        return cls(
            gene_id=gene_id,
            enabled=enabled,
            kind=GENE_CONNECTION,
            from_node=from_node,
            to_node=to_node,
            weight=weight,
        )

    @classmethod
    def node(cls, gene_id: int, activation: str, enabled: bool = True) -> 'Gene':
        return cls(gene_id=gene_id, enabled=enabled, kind=GENE_NODE, activation=activation)

    @property
    def is_connection(self) -> bool:
        return self.kind == GENE_CONNECTION

    @property
    def is_node(self) -> bool:
        return self.kind == GENE_NODE

    @property
    def is_enabled_connection(self) -> bool:
        return self.enabled and self.kind == GENE_CONNECTION

    @property
    def is_enabled_node(self) -> bool:
        return self.enabled and self.kind == GENE_NODE

    @property
    def node_name(self) -> str:
        """Name of the hidden node a node gene defines."""
        return str(self.gene_id)

    def copy(self) -> 'Gene':
        return Gene(**asdict(self))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Gene':
        return cls(**data)


@dataclass
class Genome:
    """Ordered list of genes describing one network's structure."""
    genes: List[Gene] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.genes)

    def __iter__(self):
        return iter(self.genes)

    def __getitem__(self, index: int) -> Gene:
        return self.genes[index]

    @property
    def gene_ids(self) -> List[int]:
        return [g.gene_id for g in self.genes]

    @property
    def max_gene_id(self) -> int:
        """Id of the most recent gene, 0 for an empty genome."""
        if not self.genes:
            return 0
        return self.genes[-1].gene_id

    def is_sorted(self) -> bool:
        """Check the ascending-by-id ordering invariant."""
        return all(
            self.genes[i].gene_id <= self.genes[i + 1].gene_id
            for i in range(len(self.genes) - 1)
        )

    def append(self, gene: Gene) -> None:
        self.genes.append(gene)

    def enabled_connection_indexes(self) -> List[int]:
        return [i for i, g in enumerate(self.genes) if g.is_enabled_connection]

    def enabled_node_genes(self) -> List[Gene]:
        return [g for g in self.genes if g.is_enabled_node]

    def find_gene(self, gene_id: int) -> Optional[Gene]:
        """Binary search for a gene by id. The genome must be sorted."""
        ids = self.gene_ids
        index = bisect.bisect_left(ids, gene_id)
        if index < len(ids) and ids[index] == gene_id:
            return self.genes[index]
        return None

    def has_enabled_edge(self, from_node: str, to_node: str) -> bool:
        return any(
            g.is_enabled_connection and g.from_node == from_node and g.to_node == to_node
            for g in self.genes
        )

    def clone(self) -> 'Genome':
        """Deep copy with no shared gene storage."""
        return Genome(genes=[g.copy() for g in self.genes])

    def fingerprint(self) -> str:
        """Stable md5 of the genome, used to identify species in history."""
        payload = json.dumps(self.to_dict(), sort_keys=True)
        return hashlib.md5(payload.encode('utf-8')).hexdigest()

    def to_dict(self) -> Dict[str, Any]:
        return {'genes': [g.to_dict() for g in self.genes]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Genome':
        return cls(genes=[Gene.from_dict(g) for g in data.get('genes', [])])

    def __repr__(self) -> str:
        enabled = sum(1 for g in self.genes if g.enabled)
        return f"Genome(genes={len(self.genes)}, enabled={enabled}, max_id={self.max_gene_id})"
