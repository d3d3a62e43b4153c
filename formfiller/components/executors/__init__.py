from .state_injector import InjectionResult, StateInjector
from .option_matcher import OptionMatcher, OptionSelection, match_option
from .step_sequencer import StepSequencer, split_date_pair

__all__ = [
    'InjectionResult',
    'OptionMatcher',
    'OptionSelection',
    'StateInjector',
    'StepSequencer',
    'match_option',
    'split_date_pair'
]
