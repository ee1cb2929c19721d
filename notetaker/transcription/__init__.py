"""Hypothesis aggregation for NoteTaker."""

from .base import AbstractSpeechRecognizer
from .hypothesis import HypothesisDecision, classify_partial
from .scheduler import PauseScheduler, ScheduledTask, ThreadingPauseScheduler
from .aggregator import AggregationResult, SegmentAggregator
from .scripted import ScriptStep, ScriptedRecognizer

__all__ = [
    "AbstractSpeechRecognizer",
    "HypothesisDecision",
    "classify_partial",
    "PauseScheduler",
    "ScheduledTask",
    "ThreadingPauseScheduler",
    "AggregationResult",
    "SegmentAggregator",
    "ScriptStep",
    "ScriptedRecognizer",
]
