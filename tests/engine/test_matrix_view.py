"""Tests for the fixed row-major indexing convention and input coercion."""

import numpy as np
import pytest

from ioengine.engine.errors import DegenerateInputError, DimensionMismatchError
from ioengine.engine.matrix_view import (
    MatrixView,
    as_matrix,
    as_square_matrix,
    as_vector,
    require_nonzero,
    square_dimension,
)


class TestMatrixView:
    """Flat buffers with explicit dimensions."""

    def test_row_major_addressing(self) -> None:
        view = MatrixView.from_flat([1, 2, 3, 4, 5, 6], 2, 3)
        assert view[0, 2] == 3.0
        assert view[1, 0] == 4.0
        np.testing.assert_array_equal(view.to_array(), [[1, 2, 3], [4, 5, 6]])

    def test_column_major_buffer_is_transposed_explicitly(self) -> None:
        view = MatrixView.from_flat(range(1, 10), 3, 3, order="column")
        np.testing.assert_array_equal(
            view.to_array(),
            [[1, 4, 7], [2, 5, 8], [3, 6, 9]],
        )

    def test_column_major_rectangular(self) -> None:
        view = MatrixView.from_flat([1, 4, 2, 5, 3, 6], 2, 3, order="column")
        np.testing.assert_array_equal(view.to_array(), [[1, 2, 3], [4, 5, 6]])

    def test_to_flat_round_trips_dimensions(self) -> None:
        view = MatrixView.from_flat([1, 2, 3, 4, 5, 6], 3, 2)
        flat, shape = view.to_flat()
        assert shape == (3, 2)
        np.testing.assert_array_equal(flat, [1, 2, 3, 4, 5, 6])

    def test_transpose(self) -> None:
        view = MatrixView.from_flat([1, 2, 3, 4, 5, 6], 2, 3).transpose()
        assert view.shape == (3, 2)
        assert view[2, 1] == 6.0
        assert view[2, 0] == 3.0

    def test_buffer_is_read_only(self) -> None:
        view = MatrixView.from_flat([1, 2, 3, 4], 2, 2)
        with pytest.raises(ValueError):
            view.data[0] = 10.0

    def test_wrong_length_raises(self) -> None:
        with pytest.raises(DimensionMismatchError, match="dimension mismatch"):
            MatrixView.from_flat([1, 2, 3], 2, 2)

    def test_unknown_order_raises(self) -> None:
        with pytest.raises(ValueError, match="order"):
            MatrixView.from_flat([1, 2, 3, 4], 2, 2, order="diagonal")  # type: ignore[arg-type]

    def test_out_of_bounds_index(self) -> None:
        view = MatrixView.from_flat([1, 2, 3, 4], 2, 2)
        with pytest.raises(IndexError):
            view[2, 0]

    def test_engine_accepts_view(self) -> None:
        view = MatrixView.from_array([[0.1, 0.2], [0.3, 0.4]])
        np.testing.assert_array_equal(as_square_matrix(view), [[0.1, 0.2], [0.3, 0.4]])


class TestSquareDimension:

    def test_perfect_square(self) -> None:
        assert square_dimension(np.zeros(9)) == 3

    def test_not_square_raises(self) -> None:
        with pytest.raises(DimensionMismatchError):
            square_dimension(np.zeros(8))

    def test_empty_raises(self) -> None:
        with pytest.raises(DimensionMismatchError):
            square_dimension([])


class TestCoercion:
    """as_matrix / as_vector validation."""

    def test_one_dimensional_is_not_a_matrix(self) -> None:
        with pytest.raises(DimensionMismatchError):
            as_matrix([1.0, 2.0, 3.0, 4.0])

    def test_non_square_rejected(self) -> None:
        with pytest.raises(DimensionMismatchError, match="square"):
            as_square_matrix(np.ones((2, 3)))

    def test_nan_rejected(self) -> None:
        with pytest.raises(DegenerateInputError, match="NaN"):
            as_matrix([[1.0, np.nan], [0.0, 1.0]])

    def test_coercion_copies(self) -> None:
        original = np.eye(2)
        coerced = as_matrix(original)
        coerced[0, 0] = 5.0
        assert original[0, 0] == 1.0

    def test_row_vector_accepted(self) -> None:
        np.testing.assert_array_equal(as_vector([[1.0, 2.0, 3.0]], 3), [1.0, 2.0, 3.0])

    def test_vector_length_mismatch(self) -> None:
        with pytest.raises(DimensionMismatchError, match="expected \\(3,\\)"):
            as_vector([1.0, 2.0], 3, "production")

    def test_require_nonzero_reports_positions(self) -> None:
        with pytest.raises(DegenerateInputError, match=r"\[1, 3\]"):
            require_nonzero(np.array([1.0, 0.0, 2.0, 0.0]), "production")
