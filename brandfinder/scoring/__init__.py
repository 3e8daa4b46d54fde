from .meaning import MeaningEngine, MeaningExplanation, dedupe_by_meaning_diversity
from .scorer import (
    BrandabilityStrategy,
    BrandScorer,
    ScoringContext,
    ScoringStrategy,
    satisfies_keyword_constraint,
)

__all__ = [
    'MeaningEngine', 'MeaningExplanation', 'dedupe_by_meaning_diversity',
    'BrandabilityStrategy', 'BrandScorer', 'ScoringContext', 'ScoringStrategy',
    'satisfies_keyword_constraint',
]
