from .rng import SeededRandom
from .candidate_generator import CandidateGenerator, GenerationOptions, GenerationResult

__all__ = ['SeededRandom', 'CandidateGenerator', 'GenerationOptions', 'GenerationResult']
