"""Initial particle layouts."""

from .seeding import generate_jittered_column, generate_square_block

__all__ = [
    'generate_jittered_column',
    'generate_square_block',
]
