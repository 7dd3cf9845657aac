from __future__ import annotations


class DimensionMismatchError(ValueError):
    """Operand shapes do not fit a GF(2) operation."""

    def __init__(self, operation: str, left_shape, right_shape):
        super().__init__(
            f"Invalid operation {operation}: {tuple(left_shape)} x {tuple(right_shape)}"
        )
        self.operation = operation
        self.left_shape = tuple(left_shape)
        self.right_shape = tuple(right_shape)


class CodeConstructionError(ValueError):
    """The generator (or parity-check) matrix cannot describe a usable code."""
