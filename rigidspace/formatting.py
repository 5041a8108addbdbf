"""Text representations of configurations and rigid transforms."""

from __future__ import annotations

import enum
from collections.abc import Iterable

import numpy as np

from rigidspace.liegroups import _matrix_to_quat

__all__ = [
    "OutputFormat",
    "display_config",
    "format_transform",
    "rotation_to_quaternion",
]


class OutputFormat(enum.Enum):
    """Layout of a printed transform."""

    PRETTY = "pretty"
    CONDENSED = "condensed"
    ONE_LINE = "one_line"


def display_config(q: Iterable[float], precision: int = 20) -> str:
    """Write a configuration as ``(q0,q1,...,)`` with the given precision."""
    return "(" + "".join(f"{float(x):.{precision}g}," for x in q) + ")"


def rotation_to_quaternion(rotation) -> np.ndarray:
    """Return the unit quaternion ``(x, y, z, w)`` of a rotation matrix."""
    matrix = np.asarray(rotation, dtype=float)
    if matrix.shape != (3, 3):
        raise ValueError(f"rotation must be a 3x3 matrix, got shape {matrix.shape}")
    return _matrix_to_quat(matrix)


def _format_vector(values, python_format: bool) -> str:
    numbers = [f"{float(x):g}" for x in values]
    if python_format:
        return "(" + ", ".join(numbers) + ")"
    return " ".join(numbers)


def format_transform(
    rotation, translation, output_format=OutputFormat.PRETTY, python_format=False
) -> str:
    """Write a rigid transform given by its rotation matrix and translation."""
    output_format = OutputFormat(output_format)
    rotation = np.asarray(rotation, dtype=float)
    translation = np.asarray(translation, dtype=float)
    if translation.shape != (3,):
        raise ValueError(
            f"translation must have size 3, got shape {translation.shape}"
        )
    position = _format_vector(translation, python_format)

    if output_format is OutputFormat.ONE_LINE:
        quaternion = _format_vector(rotation_to_quaternion(rotation), python_format)
        return f"q = {quaternion}, p = {position}"
    if output_format is OutputFormat.CONDENSED:
        quaternion = _format_vector(rotation_to_quaternion(rotation), python_format)
        return f"q = {quaternion}\np = {position}"

    if rotation.shape != (3, 3):
        raise ValueError(f"rotation must be a 3x3 matrix, got shape {rotation.shape}")
    opening, closing = ("( ", " )") if python_format else ("  ", "  ")
    rows = [_format_vector(row, python_format) for row in rotation]
    return (
        f"R = {opening}{rows[0]}\n"
        f"      {rows[1]}\n"
        f"      {rows[2]}{closing}\n"
        f"p = {position}"
    )