"""Season orchestration: initialization and the phase-driven transition."""

from seasonflow.season.initializer import initialize_seasonal_flow
from seasonflow.season.phases import TransitionPhase, can_transition, is_fatal, next_phase
from seasonflow.season.push import PushEngine
from seasonflow.season.transition import SeasonTransition, TransitionRun

__all__ = [
    "initialize_seasonal_flow",
    "TransitionPhase",
    "can_transition",
    "is_fatal",
    "next_phase",
    "PushEngine",
    "SeasonTransition",
    "TransitionRun",
]
