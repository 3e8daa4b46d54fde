from .word_validator import WordValidator, top_rejected_reasons
from .cache import ResultCache

__all__ = ['WordValidator', 'top_rejected_reasons', 'ResultCache']
