"""
Logging setup and sweep tracking for ablation benchmarks
"""
import logging
import sys
from datetime import datetime
from typing import Dict, Any, Optional


def setup_logging(verbose: bool = False, log_file: Optional[str] = None) -> None:
    """Configure root logging for a benchmark session"""
    level = logging.DEBUG if verbose else logging.INFO
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


class ExperimentLogger:
    """
    Logger that brackets a benchmark sweep with start/end records
    """

    def __init__(self, name: str = "dnf_shapley.sweep", config: Optional[Dict[str, Any]] = None):
        """
        Args:
            name: Logger name
            config: Optional sweep configuration
        """
        self.logger = logging.getLogger(name)
        self.config = config or {}
        self.start_time: Optional[datetime] = None

    def log_sweep_start(self, n_runs: int, modes: list) -> None:
        """
        Log the start of a sweep

        Args:
            n_runs: Number of games to evaluate
            modes: Ablation modes compared on every game
        """
        self.start_time = datetime.now()
        self.logger.info("=" * 80)
        self.logger.info("ABLATION SWEEP START")
        self.logger.info(f"Time: {self.start_time.isoformat()}")
        self.logger.info(f"Games: {n_runs} | Modes: {', '.join(modes)}")
        if self.config:
            self.logger.info(f"Config: {self.config}")
        self.logger.info("=" * 80)

    def log_sweep_end(self, results_summary: Dict[str, Any]) -> None:
        """
        Log the end of a sweep

        Args:
            results_summary: Aggregated results
        """
        duration = datetime.now() - self.start_time if self.start_time else None

        self.logger.info("ABLATION SWEEP END")
        self.logger.info(f"Duration: {duration}")
        self.logger.info(f"Results: {results_summary}")
        self.logger.info("=" * 80)

    def log_disagreement(self, name: str, max_disagreement: float) -> None:
        self.logger.warning(
            f"⚠️ Ablation modes disagree on '{name}': max |Δφ| = {max_disagreement:.3e}"
        )

    def log_milestone(self, message: str) -> None:
        self.logger.info(f"checkpoint: {message}")
