"""
Main NEAT experiment engine.

Orchestrates the generation loop:
1. Seed the population with one minimal network
2. Fill the population out by mating and mutating
3. Score every network and speciate it
4. Weight species, sort, and select survivors
5. Track the highest score and stagnation
6. Checkpoint progress
7. Repeat until an end condition is met
"""

from dataclasses import dataclass
from typing import List, Dict, Any, Optional, Callable, Union
from pathlib import Path
from datetime import datetime
import logging
import time

from ..core.errors import InvariantError
from ..ranking.sorters import Sorter
from .config import ExperimentConfig
from .fitness import Scorer
from .innovation import InnovationCounter
from .operators import new_network
from .population import Population, Specimen
from .checkpoint import (
    EvolutionCheckpoint,
    EvolutionHistory,
    GenerationStats,
    generate_run_id,
)

logger = logging.getLogger(__name__)


@dataclass
class EvolutionResult:
    """Results from an experiment."""
    run_id: str
    generations_completed: int
    highest_experiment_score: float
    best_score: float
    best_summary: str
    end_reason: str
    fittest: Optional[Specimen]
    history: EvolutionHistory
    final_population: Population
    runtime_seconds: float
    checkpoint_path: Optional[Path] = None

    def summary(self) -> str:
        """Generate summary string."""
        lines = [
            f"Experiment: {self.run_id}",
            f"Generations: {self.generations_completed}",
            f"Highest score: {self.highest_experiment_score:.4f}",
            f"Best: {self.best_summary}",
            f"Species: {len(self.final_population.species)}",
            f"Runtime: {self.runtime_seconds:.1f}s",
            f"Ended: {self.end_reason}",
        ]
        if self.checkpoint_path:
            lines.append(f"Checkpoint: {self.checkpoint_path}")
        return '\n'.join(lines)


class EvolutionEngine:
    """
    Runs a NEAT experiment one generation at a time.

    The selector is any object with a select(specimens) method returning the
    specimens to keep, such as TruncateSelector or TournamentSelector.

    Example:
        engine = EvolutionEngine(config, XorScorer(), SimpleSorter(), TruncateSelector(10))
        result = engine.evolve()
        print(result.summary())
    """

    def __init__(
        self,
        config: ExperimentConfig,
        scorer: Scorer,
        sorter: Sorter,
        selector,
        counter: Optional[InnovationCounter] = None,
        run_id: Optional[str] = None,
        stop_requested: Optional[Callable[[], bool]] = None,
    ):
        """
        Initialize the engine.

        Args:
            config: Experiment configuration
            scorer: Scores each network of a generation
            sorter: Ranks scored specimens
            selector: Picks survivors from the ranked specimens
            counter: Source of gene ids (a fresh counter if not provided)
            run_id: Optional run identifier (auto-generated if not provided)
            stop_requested: Optional callable polled after every generation;
                returning True ends the experiment
        """
        self.config = config
        self.scorer = scorer
        self.sorter = sorter
        self.selector = selector
        self.counter = counter or InnovationCounter()
        self.run_id = run_id or generate_run_id()
        self.stop_requested = stop_requested

        self.population = Population(config.population, self.counter)
        self.history = EvolutionHistory()
        self.generation = 0
        self.highest_experiment_score = 0.0
        self.stagnant_generations = 0
        self.best_score = 0.0
        self.best_summary = ''
        self.fittest: Optional[Specimen] = None
        self.end_reason: Optional[str] = None

        self.checkpoint_dir = Path(config.checkpoint_dir) if config.checkpoint_dir else None

    def initialize(self) -> None:
        """Seed the population with a single unscored minimal network."""
        self.population = Population(self.config.population, self.counter)
        self.population.add_network(new_network(self.config.inout, self.counter))

        self.history = EvolutionHistory()
        self.generation = 0
        self.highest_experiment_score = 0.0
        self.stagnant_generations = 0
        self.best_score = 0.0
        self.best_summary = ''
        self.fittest = None
        self.end_reason = None
        logger.info("Experiment %s initialized", self.run_id)

    def run_generation(self) -> GenerationStats:
        """
        Execute one generation.

        Returns:
            GenerationStats for the generation just run
        """
        if self.population.specimen_count == 0:
            raise InvariantError("Population is empty; initialize or load a checkpoint first.")

        self.generation += 1
        self.scorer.generation_start(self.generation)

        # 1. Fill out from last generation's survivors
        created = self.population.fill_out()

        # 2. Score each network and speciate it again
        networks = self.population.dump_networks()
        highest_score = 0.0
        for i, network in enumerate(networks):
            score, bonus, outcomes = self.scorer.score(network, networks, i)
            if score > highest_score:
                highest_score = score
            self.population.add_network(network, score, bonus, outcomes)

        # 3. Fitness sharing, ranking and selection
        self.population.weight_species()
        specimens = self.population.dump_specimens()
        self.best_score, self.best_summary, ranked = self.sorter.sort(specimens)
        self.fittest = ranked[0] if ranked else None
        survivors = self.selector.select(ranked)
        self.population.add_all_specimens(survivors)

        # 4. Track stagnation on raw scores
        if self.highest_experiment_score < highest_score:
            self.highest_experiment_score = highest_score
            self.stagnant_generations = 0
        else:
            self.stagnant_generations += 1

        stats = self.history.record_generation(
            generation=self.generation,
            population=self.population,
            highest_score=highest_score,
            highest_experiment_score=self.highest_experiment_score,
            stagnant_generations=self.stagnant_generations,
            best_score=self.best_score,
            best_summary=self.best_summary,
            details=self.scorer.generation_details(),
        )

        logger.info(
            "Generation %d: highest score %f, species %d, survivors %d, best %s",
            self.generation, highest_score, len(self.population.species),
            len(survivors), self.best_summary,
        )
        logger.debug(
            "Generation %d created %d offspring, scored %d networks, last gene id %d",
            self.generation, created, len(networks), self.counter.last_id,
        )
        return stats

    def check_end_condition(self, highest_score: float) -> Optional[str]:
        """
        Decide whether the experiment is over.

        Args:
            highest_score: Highest raw score of the latest generation

        Returns:
            Why the experiment ends, or None to keep going
        """
        end = self.config.end_condition
        if end.generation_num > 0 and self.generation >= end.generation_num:
            return f"reached generation: {self.generation}"
        if end.target_score > 0.0 and highest_score >= end.target_score:
            return f"target score {end.target_score:f} reached: {highest_score:f}"
        if end.stagnant_generation_count > 0 and self.stagnant_generations >= end.stagnant_generation_count:
            return f"stagnant generation reached: {self.stagnant_generations}"
        if self.stop_requested is not None and self.stop_requested():
            return "manual stop triggered"
        return None

    def evolve(
        self,
        progress_callback: Optional[Callable[[int, GenerationStats], None]] = None,
    ) -> EvolutionResult:
        """
        Run generations until an end condition is met.

        The population is seeded first unless it already holds specimens,
        as it does after load_checkpoint.

        Args:
            progress_callback: Optional callback(generation, stats)

        Returns:
            EvolutionResult with the final population and history
        """
        start_time = time.time()
        if self.population.specimen_count == 0:
            self.initialize()

        self.end_reason = None
        while self.end_reason is None:
            stats = self.run_generation()

            if progress_callback:
                progress_callback(self.generation, stats)

            self.end_reason = self.check_end_condition(stats.highest_score)

            # The final generation is always checkpointed below
            if self.end_reason is None and self._is_checkpoint_generation():
                self.save_checkpoint()

        runtime = time.time() - start_time

        checkpoint_path = None
        if self.checkpoint_dir is not None:
            checkpoint_path = self.save_checkpoint()

        logger.info("Experiment %s ended: %s", self.run_id, self.end_reason)

        return EvolutionResult(
            run_id=self.run_id,
            generations_completed=self.generation,
            highest_experiment_score=self.highest_experiment_score,
            best_score=self.best_score,
            best_summary=self.best_summary,
            end_reason=self.end_reason,
            fittest=self.fittest,
            history=self.history,
            final_population=self.population,
            runtime_seconds=runtime,
            checkpoint_path=checkpoint_path,
        )

    def _is_checkpoint_generation(self) -> bool:
        every = self.config.checkpoint_every
        return self.checkpoint_dir is not None and every > 0 and self.generation % every == 0

    def save_checkpoint(self, path: Optional[Union[str, Path]] = None) -> Path:
        """
        Save current experiment state to a checkpoint file.

        Args:
            path: Destination file (defaults to a generation-numbered file
                in the configured checkpoint directory)

        Returns:
            Path the checkpoint was written to
        """
        if path is None:
            if self.checkpoint_dir is None:
                raise ValueError("No checkpoint path given and no checkpoint_dir configured")
            path = self.checkpoint_dir / f"{self.run_id}_gen{self.generation:03d}.json"
        path = Path(path)

        checkpoint = EvolutionCheckpoint(
            run_id=self.run_id,
            generation=self.generation,
            last_gene_id=self.counter.last_id,
            config=self.config.to_dict(),
            population=self.population.to_dict(),
            history=self.history.to_dict(),
            timestamp=datetime.now().isoformat(),
            highest_experiment_score=self.highest_experiment_score,
            stagnant_generations=self.stagnant_generations,
            end_reason=self.end_reason,
        )
        checkpoint.save(path)
        logger.info("Checkpoint written: '%s'", path)
        return path

    def load_checkpoint(self, checkpoint_path: Union[str, Path]) -> None:
        """Resume an experiment from a checkpoint."""
        checkpoint = EvolutionCheckpoint.load(checkpoint_path)

        self.run_id = checkpoint.run_id
        self.generation = checkpoint.generation
        self.counter.reset(checkpoint.last_gene_id)
        self.population = Population.from_dict(
            checkpoint.population,
            self.config.population,
            self.counter,
            self.config.inout,
        )
        self.history = EvolutionHistory.from_dict(checkpoint.history)
        self.highest_experiment_score = checkpoint.highest_experiment_score
        self.stagnant_generations = checkpoint.stagnant_generations
        self.end_reason = None
        logger.info(
            "Resumed experiment %s at generation %d with %d specimens",
            self.run_id, self.generation, self.population.specimen_count,
        )

    def species_overview(self) -> List[Dict[str, Any]]:
        """Per-species summaries of the latest generation."""
        if not self.history.generations:
            return []
        return self.history.generations[-1].species
