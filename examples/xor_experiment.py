#!/usr/bin/env python3
"""
XOR Experiment

Evolves networks that compute exclusive-or of two inputs, the classic first
test for a NEAT implementation.

Usage:
    python examples/xor_experiment.py [options]

Options:
    --population N      Population size (default: 150)
    --generations N     Generation limit (default: 200)
    --keep N            Survivors per generation (default: 30)
    --seed N            Random seed for reproducibility
    --checkpoint-dir D  Write checkpoints to this directory
    --resume PATH       Resume from checkpoint file
    --verbose           Log every generation in detail
"""

import argparse
import logging
import random
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from neatevo import (
    NetworkInOut,
    ExperimentConfig,
    PopulationConfig,
    SpeciationConfig,
    EndCondition,
    EvolutionEngine,
    Scorer,
    SimpleSorter,
    TournamentSelector,
)

XOR_CASES = [
    ({'a': 0.0, 'b': 0.0}, 0.0),
    ({'a': 0.0, 'b': 1.0}, 1.0),
    ({'a': 1.0, 'b': 0.0}, 1.0),
    ({'a': 1.0, 'b': 1.0}, 0.0),
]

# (4 - total error)^2 for a perfect network
PERFECT_SCORE = 16.0


class XorScorer(Scorer):
    """Squares the distance between total error and the worst possible error."""

    def score(self, network, networks, index):
        error = 0.0
        for inputs, expected in XOR_CASES:
            output = network.evaluate(inputs)['out']
            error += min(abs(expected - output), 1.0)
        return (len(XOR_CASES) - error) ** 2, 0.0, None


def parse_args():
    parser = argparse.ArgumentParser(
        description='Evolve networks that solve XOR'
    )
    parser.add_argument(
        '--population', type=int, default=150,
        help='Population size (default: 150)'
    )
    parser.add_argument(
        '--generations', type=int, default=200,
        help='Generation limit (default: 200)'
    )
    parser.add_argument(
        '--keep', type=int, default=30,
        help='Survivors per generation (default: 30)'
    )
    parser.add_argument(
        '--seed', type=int, default=None,
        help='Random seed for reproducibility'
    )
    parser.add_argument(
        '--checkpoint-dir', type=str, default=None,
        help='Directory to write checkpoints to'
    )
    parser.add_argument(
        '--resume', type=str, default=None,
        help='Path to checkpoint file to resume from'
    )
    parser.add_argument(
        '--verbose', action='store_true',
        help='Log every generation in detail'
    )
    return parser.parse_args()


def main():
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    if args.seed is not None:
        random.seed(args.seed)

    config = ExperimentConfig(
        inout=NetworkInOut(inputs=['a', 'b'], outputs=['out']),
        population=PopulationConfig(
            population_size=args.population,
            speciation=SpeciationConfig(threshold=1.0),
        ),
        end_condition=EndCondition(
            generation_num=args.generations,
            target_score=PERFECT_SCORE - 0.5,
            stagnant_generation_count=50,
        ),
        checkpoint_every=25 if args.checkpoint_dir else 0,
        checkpoint_dir=args.checkpoint_dir,
    )

    engine = EvolutionEngine(
        config,
        XorScorer(),
        SimpleSorter(maximize=True),
        TournamentSelector(keep_count=args.keep, contenders=3),
    )
    if args.resume:
        engine.load_checkpoint(args.resume)

    result = engine.evolve()

    print("=" * 60)
    print(result.summary())
    print("=" * 60)

    if result.fittest is not None:
        print("\nFittest network:")
        for inputs, expected in XOR_CASES:
            output = result.fittest.network.evaluate(inputs)['out']
            print(f"   {inputs['a']:.0f} xor {inputs['b']:.0f} = {output:.3f} (expected {expected:.0f})")
        print(f"\nGenome: {result.fittest.network.genome.fingerprint()}")


if __name__ == '__main__':
    main()
