"""Tests for the QR matrix builder."""

import pytest

from patternqr.errors import EncodingError, InvalidInputError
from patternqr.matrix import QRMatrix, build_matrix


class TestBuildMatrix:
    @pytest.mark.parametrize("url", [
        "https://example.com",
        "http://a.io",
        "https://example.com/path?query=1&other=two#fragment",
        "https://example.com/" + "x" * 300,
    ])
    def test_matrix_is_square_odd_and_at_least_version_1(self, url):
        matrix = build_matrix(url)
        assert matrix.size >= 21
        assert matrix.size % 2 == 1
        assert all(len(row) == matrix.size for row in matrix.rows)

    def test_size_matches_version(self, example_matrix):
        assert example_matrix.size == 17 + 4 * example_matrix.version

    def test_deterministic(self):
        assert build_matrix("https://example.com") == build_matrix("https://example.com")

    def test_longer_payload_gives_larger_symbol(self, long_url):
        assert build_matrix(long_url).size > build_matrix("https://example.com").size

    def test_records_render_target(self):
        matrix = build_matrix("https://example.com", target_size=500, margin=8)
        assert matrix.target_size == 500
        assert matrix.margin == 8

    def test_cells_are_booleans(self, example_matrix):
        assert all(isinstance(cell, bool) for row in example_matrix.rows for cell in row)
        assert 0 < example_matrix.dark_count < example_matrix.size ** 2

    def test_finder_corner_is_dark(self, example_matrix):
        assert example_matrix.is_dark(0, 0)

    def test_payload_too_large(self):
        with pytest.raises(EncodingError):
            build_matrix("https://example.com/" + "a" * 5000)

    def test_empty_payload(self):
        with pytest.raises(InvalidInputError):
            build_matrix("")


class TestQRMatrix:
    def test_from_rows_freezes(self):
        matrix = QRMatrix.from_rows([[1, 0], [0, 1]])
        assert matrix.rows == ((True, False), (False, True))
        assert matrix.size == 2

    def test_dark_fraction(self):
        matrix = QRMatrix.from_rows([[True, True], [True, False]])
        assert matrix.dark_fraction == 0.75

    def test_dark_fraction_rejects_ragged_grid(self):
        matrix = QRMatrix.from_rows([[True, True], [True]])
        with pytest.raises(ValueError):
            matrix.dark_fraction

    def test_dark_fraction_rejects_empty_grid(self):
        with pytest.raises(ValueError):
            QRMatrix.from_rows([]).dark_fraction
