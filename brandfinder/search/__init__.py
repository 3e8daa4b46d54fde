from .orchestrator import SearchOrchestrator
from .relaxation import LADDER, EffectiveSettings, Rung, Stage, StageDelta, iter_stages

__all__ = ['SearchOrchestrator', 'LADDER', 'EffectiveSettings', 'Rung', 'Stage', 'StageDelta', 'iter_stages']
