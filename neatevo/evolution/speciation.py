"""
Speciation distance between genomes.

The distance combines three structural differences, each scaled by a
configurable constant:
- Excess genes: the tail of the younger genome past the older genome's
  newest gene (C1)
- Disjoint genes: genes before that tail present in only one genome (C2)
- Average absolute weight difference of shared genes (C3)

    distance = C1 * excess / longest + C2 * disjoint / longest + C3 * avg_diff

where `longest` is the larger gene count of the two genomes.
"""

import bisect
from typing import Tuple, TYPE_CHECKING

from ..core.genes import Genome

if TYPE_CHECKING:
    from .config import SpeciationConfig


def speciation_distance(
    genome_a: Genome,
    genome_b: Genome,
    c1: float,
    c2: float,
    c3: float,
) -> float:
    """
    Compute how structurally related two genomes are.

    Lower is more alike; identical genomes have distance 0.0.

    Args:
        genome_a: First genome (sorted by gene id)
        genome_b: Second genome (sorted by gene id)
        c1: Importance of excess genes
        c2: Importance of disjoint genes
        c3: Importance of shared-gene weight differences

    Returns:
        Speciation distance
    """
    genes_a = genome_a.genes
    genes_b = genome_b.genes
    longest = max(len(genes_a), len(genes_b))
    if longest == 0:
        return 0.0
    if not genes_a or not genes_b:
        # Everything in the non-empty genome lies past the other's newest gene
        return c1 * 1.0

    # The younger genome has the more recent last gene; ties keep A as younger
    if genes_b[-1].gene_id > genes_a[-1].gene_id:
        younger, older = genes_b, genes_a
    else:
        younger, older = genes_a, genes_b

    newest_older_id = older[-1].gene_id
    younger_ids = [g.gene_id for g in younger]
    split = bisect.bisect_right(younger_ids, newest_older_id)
    excess_count = len(younger) - split

    merged = sorted(younger[:split] + older, key=lambda g: g.gene_id)

    disjoint_count = 0
    shared_count = 0
    weight_sum = 0.0
    i = 0
    while i < len(merged):
        if i + 1 < len(merged) and merged[i].gene_id == merged[i + 1].gene_id:
            weight_sum += abs(merged[i].weight - merged[i + 1].weight)
            shared_count += 1
            i += 2
        else:
            disjoint_count += 1
            i += 1

    average_weight_diff = weight_sum / shared_count if shared_count else 0.0

    return (
        c1 * (excess_count / longest)
        + c2 * (disjoint_count / longest)
        + c3 * average_weight_diff
    )


def is_same_species(
    genome_a: Genome,
    genome_b: Genome,
    config: 'SpeciationConfig',
) -> Tuple[bool, float]:
    """
    Check two genomes against the configured distance threshold.

    A threshold of 0.0 turns speciation off: every genome belongs to one big
    species.

    Returns:
        Tuple of (same species, distance)
    """
    distance = speciation_distance(genome_a, genome_b, config.c1, config.c2, config.c3)
    return (config.threshold == 0.0 or distance <= config.threshold), distance
