"""Tests for the readability heuristic."""

import pytest

from patternqr.config import ScoringWeights
from patternqr.content import EmojiContent, ImageContent, TextContent
from patternqr.matrix import QRMatrix, build_matrix
from patternqr.scoring import (
    DENSITY_WARNING, FAIL_OPEN, emoji_penalty, image_penalty, matrix_penalty,
    score, text_penalty
)
from tests.conftest import encode_image, synthetic_matrix


class TestTextPenalty:
    def test_uppercase_ten_is_capped(self):
        # 2*10 + 1*10 = 30
        assert text_penalty("ABCDEFGHIJ") == 25

    def test_repeated_lowercase_is_capped(self):
        # 2*10 + 2*10 - 5 = 35
        assert text_penalty("aaaaaaaaaa") == 25

    def test_special_characters_are_capped(self):
        assert text_penalty("!@#$%^&*()") == 25

    def test_short_mixed(self):
        # 2*4 + (2 + 1 + 1 + 5)
        assert text_penalty("aB1!") == 17

    def test_repetition_bonus(self):
        # 2*2 + 2*1 - 5
        assert text_penalty("AA") == 1

    def test_other_characters(self):
        # 2*2 + 3*2, accented letters are neither ASCII upper nor lower
        assert text_penalty("éñ") == 10

    def test_backtick_is_other_not_special(self):
        assert text_penalty("`x") == 2 * 2 + 3 + 2

    def test_custom_cap(self):
        assert text_penalty("ABCDEFGHIJ", ScoringWeights(text_penalty_cap=100)) == 30


class TestEmojiPenalty:
    @pytest.mark.parametrize("emoji", ["❤", "❤\uFE0F", "\U0001F499", "\U0001F49A", "\U0001F5A4"])
    def test_simple_hearts_are_low_risk(self, emoji):
        assert 3 <= emoji_penalty(emoji) <= 6

    def test_table_values(self):
        assert emoji_penalty("\U0001F5A4") == 3
        assert emoji_penalty("\U0001F90D") == 10
        assert emoji_penalty("\U0001F525") == 7

    def test_unknown_defaults_to_fifteen(self):
        assert emoji_penalty("\U0001F600") == 15


class TestImagePenalty:
    def test_small_png(self, red_png):
        assert image_penalty(ImageContent(red_png)) == 10

    def test_large_gif(self, large_gif):
        assert image_penalty(ImageContent(large_gif)) >= 10 + 5 + 8

    def test_one_large_dimension(self):
        assert image_penalty(ImageContent(encode_image(1200, 10, "PNG"))) == 15

    def test_webp(self):
        assert image_penalty(ImageContent(encode_image(20, 20, "WEBP"))) == 13

    def test_unreadable(self):
        assert image_penalty(ImageContent(b"garbage")) == 15


class TestMatrixPenalty:
    def test_large_and_dense(self):
        assert matrix_penalty(synthetic_matrix(29, 0.75)) == 18

    def test_medium_balanced(self):
        assert matrix_penalty(synthetic_matrix(21, 0.5)) == 5

    def test_medium_sparse(self):
        assert matrix_penalty(synthetic_matrix(23, 0.1)) == 10

    def test_small_balanced(self):
        assert matrix_penalty(synthetic_matrix(19, 0.5)) == 0


class TestScore:
    def test_plain_url_is_readable(self, example_matrix):
        verdict = score(example_matrix, None)
        assert verdict.is_readable
        assert verdict.warning is None
        assert verdict.score == 100 - matrix_penalty(example_matrix)

    def test_special_text_on_long_url(self, long_url):
        matrix = build_matrix(long_url)
        verdict = score(matrix, TextContent("!@#$%^&*()"))
        assert verdict.score < 70
        assert not verdict.is_readable
        assert "!@#$%^&*()" in verdict.warning

    def test_large_gif_warns_about_image(self, large_gif):
        matrix = build_matrix("https://example.com/" + "a" * 40)
        verdict = score(matrix, ImageContent(large_gif))
        assert not verdict.is_readable
        assert "uploaded image" in verdict.warning

    def test_content_penalty_alone_sets_warning(self):
        weights = ScoringWeights(unknown_emoji_penalty=35)
        verdict = score(synthetic_matrix(19, 0.5), EmojiContent("\U0001F600"), weights)
        assert verdict.score == 65
        assert "\U0001F600" in verdict.warning

    def test_matrix_term_attributes_to_content(self):
        # 100 - 20 - 18 = 62
        verdict = score(synthetic_matrix(29, 0.75), TextContent("abcde"))
        assert verdict.score == 62
        assert 'The text "abcde"' in verdict.warning

    def test_matrix_term_without_content_warns_density(self):
        verdict = score(synthetic_matrix(29, 0.75), None, ScoringWeights(start_score=80))
        assert verdict.score == 62
        assert verdict.warning == DENSITY_WARNING

    def test_severe_score_overrides_with_density_warning(self):
        weights = ScoringWeights(unknown_emoji_penalty=45)
        verdict = score(synthetic_matrix(29, 0.75), EmojiContent("\U0001F600"), weights)
        assert verdict.score == 37
        assert verdict.warning == DENSITY_WARNING

    def test_score_is_not_clamped(self):
        weights = ScoringWeights(unknown_emoji_penalty=150)
        verdict = score(synthetic_matrix(19, 0.5), EmojiContent("\U0001F600"), weights)
        assert verdict.score == -50
        assert not verdict.is_readable

    def test_threshold_is_inclusive(self):
        weights = ScoringWeights(unknown_emoji_penalty=30)
        verdict = score(synthetic_matrix(19, 0.5), EmojiContent("\U0001F600"), weights)
        assert verdict.score == 70
        assert verdict.is_readable
        assert verdict.warning is None

    def test_idempotent(self, example_matrix, large_gif):
        for content in (None, TextContent("Hello"), EmojiContent("❤"), ImageContent(large_gif)):
            verdicts = {score(example_matrix, content) for _ in range(5)}
            assert len(verdicts) == 1

    @pytest.mark.parametrize("matrix", [
        QRMatrix(rows=(), version=0),
        QRMatrix.from_rows([[True, False], [True]]),
    ])
    def test_malformed_matrix_fails_open(self, matrix):
        assert score(matrix, TextContent("abc")) == FAIL_OPEN
        assert FAIL_OPEN.is_readable and FAIL_OPEN.warning is None
