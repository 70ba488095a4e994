"""Matrix assembly for multi-metric rows."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from cargo_profiler.errors import MisalignedDataError


def assemble_matrix(rows: Sequence[Sequence[float]], width: int) -> np.ndarray:
    """Stack metric vectors into a ``(len(rows), width)`` float64 matrix.

    Parameters
    ----------
    rows : sequence of sequences of float
        One metric vector per function, in extraction order.
    width : int
        Expected number of metrics per row.

    Returns
    -------
    numpy.ndarray
        The stacked matrix; ``(0, width)`` when ``rows`` is empty.

    Raises
    ------
    MisalignedDataError
        If any row does not have exactly ``width`` values. Rows are never
        padded or cut to fit.
    """

    for i, row in enumerate(rows):
        if len(row) != width:
            raise MisalignedDataError(expected=width, found=len(row), row=i)
    if not rows:
        return np.empty((0, width), dtype=np.float64)
    return np.vstack([np.asarray(r, dtype=np.float64) for r in rows])
