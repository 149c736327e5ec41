from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class EvaluatorConfig:
    """
    Settings of an Evaluator.

    Attributes:
        parallel: Run independent Ops on a thread pool instead of one after another
        max_workers: Size of the thread pool; ``None`` lets
            ``concurrent.futures`` pick a default. Ignored when ``parallel`` is False
        log_plan: Log the execution plan of every run at DEBUG level
    """

    parallel: bool = False
    max_workers: Optional[int] = None
    log_plan: bool = False

    def __post_init__(self) -> None:
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError(f"max_workers must be a positive integer, got {self.max_workers}")
