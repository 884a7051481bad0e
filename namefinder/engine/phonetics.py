"""Letter-level heuristics shared by the filter and the scorer."""

import re

VOWELS = "aeiouy"

_VOWEL_GROUP = re.compile(r"[aeiouy]+")
_CONSONANT_RUN = re.compile(r"[bcdfghjklmnpqrstvwxyz]+")
_NON_LETTER = re.compile(r"[^a-z]")
_TRIPLE_LETTER = re.compile(r"(.)\1\1")
_HARSH_PAIR = re.compile(r"[qzx]{2,}")
_SOFT_AMBIGUITY = re.compile(r"(rn|vv|lll|iii)")


def letters_only(name: str) -> str:
    return _NON_LETTER.sub("", name.lower())


def vowel_ratio(name: str) -> float:
    letters = letters_only(name)
    if not letters:
        return 0.0
    return sum(1 for ch in letters if ch in VOWELS) / len(letters)


def syllable_chunks(name: str) -> int:
    """Count vowel groups, a cheap stand-in for syllables."""
    return len(_VOWEL_GROUP.findall(name.lower()))


def longest_consonant_run(name: str) -> int:
    runs = _CONSONANT_RUN.findall(letters_only(name))
    return max((len(run) for run in runs), default=0)


def has_triple_letter(name: str) -> bool:
    return bool(_TRIPLE_LETTER.search(name))


def has_vowel(name: str) -> bool:
    return any(ch in VOWELS for ch in name.lower())


def pronounceability_score(name: str) -> int:
    """Score 0-100 for how easily a name is said aloud."""
    lowered = letters_only(name)
    if not lowered:
        return 0

    ratio = vowel_ratio(lowered)
    score = 58

    if 0.28 <= ratio <= 0.62:
        score += 18
    elif 0.22 <= ratio <= 0.70:
        score += 9
    else:
        score -= 16

    if longest_consonant_run(lowered) >= 4:
        score -= 18
    if has_triple_letter(lowered):
        score -= 12
    if _HARSH_PAIR.search(lowered):
        score -= 8
    if _SOFT_AMBIGUITY.search(lowered):
        score -= 6

    syllables = syllable_chunks(lowered)
    if 2 <= syllables <= 3:
        score += 10
    elif syllables in (1, 4):
        score += 3
    else:
        score -= 6

    return max(0, min(100, int(round(score))))
