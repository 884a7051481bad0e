"""Unit tests for candidate generation."""

import pytest

from namefinder.engine.generator import (
    GenerationInput, GenerationOptions, compact_to_length, generate_candidates, merge_readable_parts,
    tactic_weights, tokenise_keywords,
)
from namefinder.engine.models import AutoFindControls, KeywordInclusion, NameStyle, Strategy
from namefinder.engine.phonetics import has_vowel


def make_input(**overrides) -> GenerationInput:
    values = dict(
        keyword="blink pixel snap",
        industry="Technology",
        vibe="futuristic",
        max_length=9,
        controls=AutoFindControls(seed="fixed"),
    )
    values.update(overrides)
    return GenerationInput(**values)


class TestGenerateCandidates:
    """Test the candidate pool."""

    def test_deterministic_for_same_seed(self, vocabulary):
        first = generate_candidates(make_input(), pool_size=300, vocabulary=vocabulary)
        second = generate_candidates(make_input(), pool_size=300, vocabulary=vocabulary)

        assert [c.name for c in first.candidates] == [c.name for c in second.candidates]

    def test_salt_changes_the_pool(self, vocabulary):
        base = generate_candidates(make_input(), pool_size=300, vocabulary=vocabulary)
        salted = generate_candidates(
            make_input(), pool_size=300, options=GenerationOptions(seed_salt="attempt-2"), vocabulary=vocabulary
        )

        assert [c.name for c in base.candidates] != [c.name for c in salted.candidates]

    @pytest.mark.parametrize("max_length", [4, 6, 9, 14])
    def test_length_invariant(self, vocabulary, max_length):
        result = generate_candidates(make_input(max_length=max_length), pool_size=300, vocabulary=vocabulary)

        assert result.candidates
        assert all(3 <= len(c.name) <= max_length for c in result.candidates)

    def test_names_are_unique(self, vocabulary):
        result = generate_candidates(make_input(), pool_size=300, vocabulary=vocabulary)
        names = [c.name for c in result.candidates]

        assert len(names) == len(set(names))

    def test_real_words_pool_has_vowels(self, vocabulary):
        result = generate_candidates(make_input(), pool_size=300, vocabulary=vocabulary)
        assert any(has_vowel(c.name) for c in result.candidates)

    def test_exact_keyword_always_present(self, vocabulary):
        controls = AutoFindControls(seed="fixed", must_include_keyword=KeywordInclusion.EXACT)
        result = generate_candidates(
            make_input(keyword="snap", controls=controls, max_length=10), pool_size=300, vocabulary=vocabulary
        )

        assert result.candidates
        assert all("snap" in c.name for c in result.candidates)

    def test_exact_keyword_longer_than_max_length_yields_no_names(self, vocabulary):
        controls = AutoFindControls(seed="s", must_include_keyword=KeywordInclusion.EXACT)
        result = generate_candidates(
            make_input(keyword="photography", vibe=None, controls=controls, max_length=6),
            options=GenerationOptions(allow_generic_affix=True),
            vocabulary=vocabulary,
        )

        assert result.candidates == []

    def test_keyword_tokens_reported(self, vocabulary):
        result = generate_candidates(make_input(), pool_size=300, vocabulary=vocabulary)

        assert result.keyword_tokens == ["blink", "pixel", "snap"]
        assert result.related_terms[:3] == ["blink", "pixel", "snap"]

    def test_strategies_are_closed_enum(self, vocabulary):
        result = generate_candidates(make_input(), pool_size=300, vocabulary=vocabulary)
        assert all(isinstance(c.strategy, Strategy) for c in result.candidates)


class TestHelpers:
    """Test the building blocks."""

    def test_tokenise_drops_stopwords_and_short_parts(self, vocabulary):
        assert tokenise_keywords("The best a coffee & tea", vocabulary) == ["best", "coffee", "tea"]

    def test_tokenise_caps_tokens(self, vocabulary):
        tokens = tokenise_keywords("one two three four five six seven eight", vocabulary)
        assert len(tokens) <= 6

    def test_merge_shares_boundary_letter(self):
        assert merge_readable_parts("nova", "aura") == "novaura"

    def test_merge_softens_consonant_collision(self):
        assert merge_readable_parts("pixel", "snap") == "pixelasnap"

    def test_compact_to_length(self):
        assert len(compact_to_length("brightpixelstudio", 9)) <= 9
        assert compact_to_length("nova", 9) == "nova"

    def test_blend_style_favours_invented_tactics(self):
        blends = dict(tactic_weights(NameStyle.BRANDABLE_BLENDS, False))
        words = dict(tactic_weights(NameStyle.REAL_WORDS, False))

        assert blends['portmanteau'] > words['portmanteau']
        assert blends['two_word_compound'] == words['two_word_compound']
