from .registry import MenuRegistry
from .results import ActionResult, is_result_like
from .sequence import Step, StepKind, StepSequence, as_sequence, is_sequence
from .service import ButtonPress, CallbackDispatcher, DispatchResult, DispatchState


__all__ = [
    'ActionResult',
    'ButtonPress',
    'CallbackDispatcher',
    'DispatchResult',
    'DispatchState',
    'MenuRegistry',
    'Step',
    'StepKind',
    'StepSequence',
    'as_sequence',
    'is_result_like',
    'is_sequence',
]
