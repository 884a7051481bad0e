"""Unit tests for the structural filter rules."""

import pytest

from namefinder.engine.filters import (
    evaluate_candidate, is_pronounceable, min_vowel_ratio, normalise_terms, top_rejected_reasons,
)
from namefinder.engine.models import AutoFindControls, NameStyle


class TestEvaluateCandidate:
    """Test accept/reject decisions."""

    def test_awkward_cluster_rejected(self, vocabulary):
        decision = evaluate_candidate("zzzzqzx", 10, AutoFindControls(), vocabulary=vocabulary)

        assert not decision.accepted
        assert "awkward_cluster" in decision.reasons

    def test_blend_accepted(self, vocabulary):
        controls = AutoFindControls(style=NameStyle.BRANDABLE_BLENDS)
        decision = evaluate_candidate("blinkr", 8, controls, vocabulary=vocabulary)

        assert decision.accepted
        assert decision.reasons == []

    def test_reports_every_reason(self, vocabulary):
        decision = evaluate_candidate("ab-1", 3, AutoFindControls(), vocabulary=vocabulary)

        assert "too_long" in decision.reasons
        assert "contains_hyphen" in decision.reasons
        assert "contains_number" in decision.reasons

    def test_hyphen_and_numbers_allowed_by_controls(self, vocabulary):
        controls = AutoFindControls(allow_hyphen=True, allow_numbers=True)
        decision = evaluate_candidate("nova-1", 10, controls, vocabulary=vocabulary)

        assert "contains_hyphen" not in decision.reasons
        assert "contains_number" not in decision.reasons

    def test_too_short(self, vocabulary):
        decision = evaluate_candidate("ax", 10, AutoFindControls(), vocabulary=vocabulary)
        assert "too_short" in decision.reasons

    def test_repeated_letters(self, vocabulary):
        decision = evaluate_candidate("booost", 10, AutoFindControls(), vocabulary=vocabulary)
        assert "repeated_letters" in decision.reasons

    def test_trademark_fragment(self, vocabulary):
        decision = evaluate_candidate("ubermint", 10, AutoFindControls(), vocabulary=vocabulary)
        assert "trademark_like_fragment" in decision.reasons

    def test_blocklist(self, vocabulary):
        decision = evaluate_candidate(
            "novamint", 10, AutoFindControls(), blocklist=["mint"], vocabulary=vocabulary
        )
        assert "blocked_term:mint" in decision.reasons

    def test_allowlist_requires_a_root(self, vocabulary):
        missing = evaluate_candidate(
            "novamint", 10, AutoFindControls(), allowlist=["halo"], vocabulary=vocabulary
        )
        present = evaluate_candidate(
            "halomint", 10, AutoFindControls(), allowlist=["halo"], vocabulary=vocabulary
        )

        assert "missing_allowlist_root" in missing.reasons
        assert "missing_allowlist_root" not in present.reasons

    def test_input_is_sanitised(self, vocabulary):
        decision = evaluate_candidate("  NoVa Mint! ", 10, AutoFindControls(), vocabulary=vocabulary)
        assert decision.accepted


class TestPronounceability:
    """Test vowel and cluster rules."""

    def test_vowel_ratio_minimum_tightens_with_length(self):
        assert min_vowel_ratio(6, NameStyle.REAL_WORDS) < min_vowel_ratio(12, NameStyle.REAL_WORDS)

    def test_blends_are_more_lenient(self):
        assert min_vowel_ratio(9, NameStyle.BRANDABLE_BLENDS) < min_vowel_ratio(9, NameStyle.REAL_WORDS)

    @pytest.mark.parametrize("name", ["strngth", "bcdfg", "aeiouae"])
    def test_unpronounceable(self, name):
        assert not is_pronounceable(name, NameStyle.REAL_WORDS)

    @pytest.mark.parametrize("name", ["novamint", "halo", "pixelnova"])
    def test_pronounceable(self, name):
        assert is_pronounceable(name, NameStyle.REAL_WORDS)


def test_normalise_terms():
    assert normalise_terms([" Mint ", "mint", "-halo-", "", None]) == ["mint", "halo"]


def test_top_rejected_reasons_orders_by_count():
    reasons = ["too_long", "awkward_cluster", "too_long", "contains_number", "too_long", "awkward_cluster"]

    assert top_rejected_reasons(reasons, limit=2) == [("too_long", 3), ("awkward_cluster", 2)]
