"""Structural accept/reject rules for raw candidate names.

Every rule runs so a rejection carries all of its reasons; the orchestrator
aggregates them into the run summary.
"""

import re
from collections import Counter
from typing import Iterable, List, Optional, Sequence, Tuple

from .models import AutoFindControls, FilterDecision, NameStyle
from .phonetics import letters_only, longest_consonant_run, syllable_chunks, vowel_ratio
from .vocabulary import Vocabulary, load_vocabulary

_DISALLOWED = re.compile(r"[^a-z0-9-]")
_REPEATED = re.compile(r"(.)\1\1")
_DIGIT = re.compile(r"\d")


def sanitise_candidate(raw: str) -> str:
    return _DISALLOWED.sub("", (raw or "").lower())


def normalise_terms(terms: Optional[Iterable[str]]) -> List[str]:
    """Clean block/allow list entries, keeping first-seen order."""
    cleaned = (sanitise_candidate(term).strip("-") for term in (terms or []))
    return list(dict.fromkeys(term for term in cleaned if term))


def min_vowel_ratio(length: int, style: NameStyle) -> float:
    if length <= 7:
        minimum = 0.18
    elif length <= 10:
        minimum = 0.20
    else:
        minimum = 0.24
    if style == NameStyle.BRANDABLE_BLENDS:
        return max(0.16, minimum - 0.03)
    return minimum


def is_pronounceable(name: str, style: NameStyle) -> bool:
    letters = letters_only(name)
    if not letters:
        return False

    ratio = vowel_ratio(letters)
    if ratio < min_vowel_ratio(len(letters), style) or ratio > 0.75:
        return False
    if longest_consonant_run(letters) >= 5:
        return False

    chunks = syllable_chunks(letters)
    max_chunks = 5 if style == NameStyle.BRANDABLE_BLENDS else 4
    return 1 <= chunks <= max_chunks


def _trademark_collision(name: str, fragments: Sequence[str]) -> bool:
    for fragment in fragments:
        if fragment in name:
            return True
        if len(name) >= 4 and name in fragment:
            return True
    return False


def evaluate_candidate(raw: str,
                       max_length: int,
                       controls: AutoFindControls,
                       blocklist: Sequence[str] = (),
                       allowlist: Sequence[str] = (),
                       vocabulary: Optional[Vocabulary] = None) -> FilterDecision:
    """Run every structural rule against ``raw`` and collect the failures."""
    vocab = vocabulary or load_vocabulary()
    name = sanitise_candidate(raw)
    reasons: List[str] = []

    if len(name) < 3:
        reasons.append("too_short")
    if len(name) > max_length:
        reasons.append("too_long")

    if not controls.allow_hyphen and "-" in name:
        reasons.append("contains_hyphen")
    if not controls.allow_numbers and _DIGIT.search(name):
        reasons.append("contains_number")

    if any(cluster in name for cluster in vocab.banned_clusters):
        reasons.append("awkward_cluster")
    if any(run in name for run in vocab.visual_ambiguity):
        reasons.append("visual_ambiguity")
    if _REPEATED.search(name):
        reasons.append("repeated_letters")
    if not is_pronounceable(name, controls.style):
        reasons.append("low_pronounceability")
    if name and _trademark_collision(name, vocab.trademark_fragments):
        reasons.append("trademark_like_fragment")

    for blocked in blocklist:
        if blocked and blocked in name:
            reasons.append(f"blocked_term:{blocked}")
            break

    if allowlist and not any(allowed and allowed in name for allowed in allowlist):
        reasons.append("missing_allowlist_root")

    return FilterDecision(accepted=not reasons, reasons=reasons)


def top_rejected_reasons(reasons: Iterable[str], limit: int = 6) -> List[Tuple[str, int]]:
    """Most frequent rejection reasons; ties keep first-seen order."""
    # Counter preserves insertion order and most_common() sorts stably
    return Counter(reasons).most_common(limit)
