from __future__ import annotations

import numpy as np
import pytest

from cargo_profiler.errors import MisalignedDataError
from cargo_profiler.profiling.matrix import assemble_matrix


def test_assemble_stacks_rows_in_order() -> None:
    m = assemble_matrix([(1.0, 2.0, 3.0), (4.0, 5.0, 6.0)], 3)
    assert m.shape == (2, 3)
    assert m.dtype == np.float64
    np.testing.assert_array_equal(m[1], [4.0, 5.0, 6.0])


def test_assemble_empty_has_fixed_width() -> None:
    assert assemble_matrix([], 9).shape == (0, 9)


def test_misaligned_rows_are_fatal() -> None:
    with pytest.raises(MisalignedDataError) as ei:
        assemble_matrix([(1.0, 2.0), (3.0,), (4.0, 5.0)], 2)
    assert (ei.value.row, ei.value.expected, ei.value.found) == (1, 2, 1)


def test_rows_wider_than_expected_are_not_cut() -> None:
    with pytest.raises(MisalignedDataError):
        assemble_matrix([(1.0, 2.0, 3.0)], 2)
