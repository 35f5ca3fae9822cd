"""Simulation headless et parallélisation des rollouts."""

from .parallel import EpisodeSummary, ParallelRolloutRunner, RolloutSummary, WorkerSummary
from .policies import AgentPolicy, FirstLegalPolicy, RandomLegalPolicy
from .runner import HeadlessEnv, StepResult

__all__ = [
    "AgentPolicy",
    "FirstLegalPolicy",
    "RandomLegalPolicy",
    "HeadlessEnv",
    "StepResult",
    "EpisodeSummary",
    "ParallelRolloutRunner",
    "RolloutSummary",
    "WorkerSummary",
]
