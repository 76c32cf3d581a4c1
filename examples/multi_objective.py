#!/usr/bin/env python3
"""
Multi-Objective Experiment

Evolves networks that approximate a sine wave while staying small. Accuracy
is maximized and gene count minimized; specimens are ranked by the
hypervolume their two outcomes cover.

Usage:
    python examples/multi_objective.py [options]

Options:
    --population N      Population size (default: 100)
    --generations N     Generation limit (default: 100)
    --keep N            Survivors per generation (default: 25)
    --seed N            Random seed for reproducibility
"""

import argparse
import logging
import random
import sys
from pathlib import Path

import numpy as np

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from neatevo import (
    NetworkInOut,
    ExperimentConfig,
    PopulationConfig,
    SpeciationConfig,
    MutateConfig,
    EndCondition,
    EvolutionEngine,
    Scorer,
    HypervolumeIndicatorSorter,
    TruncateSelector,
)
from neatevo.evolution import NoveltySearchTally

SAMPLES = np.linspace(-np.pi, np.pi, 16)
MAX_GENES = 60


class SineScorer(Scorer):
    """
    Outcomes are [accuracy, gene count].

    Accuracy is 1 / (1 + mean squared error). A novelty tally counts how many
    distinct rounded behaviours each generation produces.
    """

    def __init__(self):
        self.tally = NoveltySearchTally(max_fingerprints=500)
        self.novel = 0

    def generation_start(self, generation_num):
        self.novel = 0

    def score(self, network, networks, index):
        outputs = np.array([network.evaluate({'x': float(x)})['y'] for x in SAMPLES])
        mse = float(np.mean((outputs - np.sin(SAMPLES)) ** 2))
        accuracy = 1.0 / (1.0 + mse)

        behaviour = ','.join(f"{o:.1f}" for o in outputs)
        if self.tally.seen(behaviour) == 1:
            self.novel += 1

        return accuracy, 0.0, [accuracy, float(len(network.genome))]

    def generation_details(self):
        return {'novel_behaviours': self.novel, 'tally_size': len(self.tally)}


def parse_args():
    parser = argparse.ArgumentParser(
        description='Evolve small networks approximating sine'
    )
    parser.add_argument(
        '--population', type=int, default=100,
        help='Population size (default: 100)'
    )
    parser.add_argument(
        '--generations', type=int, default=100,
        help='Generation limit (default: 100)'
    )
    parser.add_argument(
        '--keep', type=int, default=25,
        help='Survivors per generation (default: 25)'
    )
    parser.add_argument(
        '--seed', type=int, default=None,
        help='Random seed for reproducibility'
    )
    return parser.parse_args()


def progress_callback(generation, stats):
    """Print progress during evolution."""
    print(
        f"\r   Gen {generation:3d} | "
        f"Best volume: {stats.best_score:.4f} | "
        f"Species: {stats.species_count} | "
        f"Novel: {stats.details.get('novel_behaviours', 0)}",
        end='', flush=True
    )


def main():
    args = parse_args()
    logging.basicConfig(level=logging.WARNING, format='%(levelname)s %(name)s: %(message)s')

    if args.seed is not None:
        random.seed(args.seed)

    config = ExperimentConfig(
        inout=NetworkInOut(inputs=['x'], outputs=['y']),
        population=PopulationConfig(
            population_size=args.population,
            speciation=SpeciationConfig(threshold=1.5),
            mutate=MutateConfig(available_node_functions=['sine', 'gaussian', 'bipolar_sigmoid']),
        ),
        end_condition=EndCondition(generation_num=args.generations),
    )

    sorter = HypervolumeIndicatorSorter(
        reference_point=[0.0, float(MAX_GENES)],
        maximize=[True, False],
        weights=[1.0, 0.05],
    )

    engine = EvolutionEngine(config, SineScorer(), sorter, TruncateSelector(args.keep))
    result = engine.evolve(progress_callback=progress_callback)

    print()
    print("=" * 60)
    print(result.summary())
    print("=" * 60)

    print("\nSpecies in the final generation:")
    for species in engine.species_overview():
        print(
            f"   {species['fingerprint'][:8]}  members: {species['specimens']:3d}  "
            f"highest score: {species['highest_score']:.4f}"
        )


if __name__ == '__main__':
    main()
