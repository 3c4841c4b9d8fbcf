from .ids import generate_id, validate_id


__all__ = [
    'generate_id',
    'validate_id',
]
