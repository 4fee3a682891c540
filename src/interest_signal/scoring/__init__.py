"""Scoring: behavioral engagement and Probability-to-Act."""

from interest_signal.scoring.behavioral import behavioral_score, recency_factor
from interest_signal.scoring.pta import pta, probability_to_act, strongest_signal

__all__ = [
    "behavioral_score",
    "probability_to_act",
    "pta",
    "recency_factor",
    "strongest_signal",
]
