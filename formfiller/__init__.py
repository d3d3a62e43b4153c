"""
formfiller - resilient field filling for framework-managed browser forms.
"""
from formfiller.config import FillerConfig, SequencePolicy, load_config
from formfiller.components.models import (
    EventKind,
    FieldDescriptor,
    FieldKind,
    FillErrorKind,
    MatchTier,
    SequenceReport,
    StepResult,
    StrategyUsed,
)
from formfiller.components.executors import StepSequencer

__version__ = "0.1.0"

__all__ = [
    'EventKind',
    'FieldDescriptor',
    'FieldKind',
    'FillErrorKind',
    'FillerConfig',
    'MatchTier',
    'SequencePolicy',
    'SequenceReport',
    'StepResult',
    'StepSequencer',
    'StrategyUsed',
    'load_config'
]
