"""
Target resolution for Nullistant.
Additive multi-factor scoring of on-screen entities against an intent.
"""
from nullistant.resolver.target_resolver import (
    ResolutionResult,
    ScoredCandidate,
    ScoringWeights,
    TargetResolver,
    word_overlap,
)

__all__ = ["ResolutionResult", "ScoredCandidate", "ScoringWeights", "TargetResolver", "word_overlap"]
