"""Brandability scoring and ranking.

Each dimension is scored 0-100 on its own; the final score is the weighted
sum using the weights from the vocabulary file.
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from .meaning import Concept, build_meaning_breakdown, dedupe_by_meaning_diversity
from .models import (
    AutoFindControls, Candidate, KeywordInclusion, KeywordPosition, QualityBand, ScoredCandidate,
    Strategy,
)
from .phonetics import pronounceability_score, syllable_chunks
from .vocabulary import Vocabulary, load_vocabulary

_DOUBLED = re.compile(r"(.)\1")
_HARSH_PAIR = re.compile(r"[xzq]{2,}")

HIGH_BAND = 80.0
MEDIUM_BAND = 65.0


@dataclass
class BrandabilityScore:
    score: float
    breakdown: Dict[str, float]
    quality_band: QualityBand
    why_tag: str
    pronounceability: int


def _clamp(value: float) -> float:
    return max(0.0, min(100.0, value))


def _count_hits(name: str, terms: Sequence[str]) -> int:
    return sum(1 for term in dict.fromkeys(terms) if term and term in name)


def quality_band(score: float) -> QualityBand:
    if score >= HIGH_BAND:
        return QualityBand.HIGH
    if score >= MEDIUM_BAND:
        return QualityBand.MEDIUM
    return QualityBand.LOW


def length_score(name: str) -> float:
    if len(name) < 4:
        return 80.0
    return max(20.0, 100.0 - max(0, len(name) - 6) * 9)


def memorability_score(name: str, vocab: Vocabulary) -> float:
    score = 60.0
    if any(name.endswith(s) and len(name) > len(s) + 2 for s in vocab.trendy_suffixes):
        score += 15
    if any(name.startswith(p) and len(name) > len(p) + 2 for p in vocab.generic_prefixes):
        score -= 15
    if any(name.endswith(s) and len(name) > len(s) + 2 for s in vocab.generic_suffixes):
        score -= 15
    if len(name) <= 8:
        score += 10
    if len(_DOUBLED.findall(name)) == 1:
        score += 5
    return _clamp(score)


def extension_score(tld: str, vocab: Vocabulary) -> float:
    return float(vocab.tld_strength.get(tld.lstrip('.').lower(), vocab.default_tld_strength))


def character_score(name: str, vocab: Vocabulary) -> float:
    score = 100.0
    if "-" in name:
        score -= 30
    if any(ch.isdigit() for ch in name):
        score -= 30
    if _DOUBLED.search(name):
        score -= 5
    score -= 15 * _count_hits(name, vocab.ambiguous_runs)
    return _clamp(score)


def _prefix_similarity(a: str, b: str, width: int = 4) -> float:
    if len(a) < width or len(b) < width:
        return 0.0
    return sum(1 for x, y in zip(a[:width], b[:width]) if x == y) / width


def brand_risk_score(name: str, vocab: Vocabulary) -> float:
    """100 means no collision risk; penalties pile up from there."""
    score = 100.0
    if name in vocab.dictionary_words:
        score -= 25
    if any(brand != name and _prefix_similarity(name, brand) >= 0.75 for brand in vocab.known_brands):
        score -= 30
    if any(fragment in name for fragment in vocab.trademark_fragments):
        score -= 40

    if name.endswith("hub") and len(name) > 3:
        stem = name[:-3]
        for brand in vocab.hub_brands:
            if not brand.endswith("hub") or brand == name:
                continue
            brand_stem = brand[:-3]
            if stem[:1] == brand_stem[:1] and abs(len(stem) - len(brand_stem)) <= 1:
                score -= 35
                break
    return _clamp(score)


def _vibe_letter_score(name: str, vibe_key: str) -> float:
    if vibe_key == "luxury":
        smooth = _count_hits(name, ["l", "m", "n", "r", "v", "s"])
        return smooth * 0.35 + (0.8 if name[-1:] in ("a", "o", "e") else 0)
    if vibe_key == "futuristic":
        return _count_hits(name, ["x", "z", "v", "q", "neo", "nova", "flux", "nex"]) * 0.65
    if vibe_key == "playful":
        return _count_hits(name, ["b", "p", "k", "z", "joy", "pop", "spark"]) * 0.5
    if vibe_key == "trustworthy":
        hits = _count_hits(name, ["clear", "safe", "true", "secure", "solid", "trust", "anchor"])
        return hits * 0.7 - (1.1 if _HARSH_PAIR.search(name) else 0)
    if vibe_key == "minimal":
        if len(name) <= 8:
            bonus = 1.2
        elif len(name) <= 10:
            bonus = 0.6
        else:
            bonus = -0.6
        clutter = _HARSH_PAIR.search(name) or name.endswith(("ify", "labs", "works"))
        return bonus - (0.9 if clutter else 0)
    return 0.0


def vibe_fit_score(name: str, vibe: Optional[str], vocab: Vocabulary) -> float:
    flavor = vocab.vibe(vibe)
    if flavor is None:
        return 50.0
    key = flavor.name.lower()
    return _clamp(50 + 12 * _count_hits(name, flavor.terms()) + 8 * _vibe_letter_score(name, key))


def relevance_score(name: str,
                    industry: Optional[str],
                    keyword_tokens: Sequence[str],
                    vocab: Vocabulary) -> float:
    score = 40.0

    full_hits = [token for token in keyword_tokens if token in name]
    if full_hits:
        score += 35
    if len(full_hits) >= 2:
        score += 15
    if any(
        token not in name and len(token[:-1]) >= 3 and token[:-1] in name
        for token in keyword_tokens
    ):
        score += 20

    lexicon = vocab.industry(industry)
    if lexicon is not None:
        terms = [t for t in lexicon.terms() if not vocab.is_generic(t)]
        score += 15 * min(2, _count_hits(name, terms))
        score -= 40 * _count_hits(name, lexicon.off_topic)
    return _clamp(score)


def _keyword_position_adjustment(name: str,
                                 keyword_tokens: Sequence[str],
                                 position: KeywordPosition) -> float:
    if not keyword_tokens or position == KeywordPosition.ANYWHERE:
        return 0.0
    hit = next((token for token in keyword_tokens if token in name), None)
    if hit is None:
        return -10.0
    if position == KeywordPosition.PREFIX:
        return 10.0 if name.startswith(hit) else -10.0
    return 10.0 if name.endswith(hit) else -10.0


def _why_tag(name: str, vibe: Optional[str], keyword_tokens: Sequence[str]) -> str:
    hint = next((token for token in keyword_tokens if token in name), "brand root")
    vibe_label = vibe.strip().capitalize() if vibe and vibe.strip() else "Balanced"
    syllables = max(1, syllable_chunks(name))
    return f"{vibe_label} vibe | {syllables} syllables | keyword hint: {hint}"


def brandability_score(name: str,
                       industry: Optional[str] = None,
                       vibe: Optional[str] = None,
                       keyword_tokens: Sequence[str] = (),
                       controls: Optional[AutoFindControls] = None,
                       strategy: Optional[Strategy] = None,
                       tld: str = "com",
                       vocabulary: Optional[Vocabulary] = None) -> BrandabilityScore:
    """Score a name 0-100 for brandability."""
    vocab = vocabulary or load_vocabulary()
    pronounceability = pronounceability_score(name)

    breakdown = {
        'length': length_score(name),
        'pronounceability': float(pronounceability),
        'memorability': memorability_score(name, vocab),
        'extension': extension_score(tld, vocab),
        'character': character_score(name, vocab),
        'brand_risk': brand_risk_score(name, vocab),
        'vibe_fit': round(vibe_fit_score(name, vibe, vocab), 2),
        'relevance': relevance_score(name, industry, keyword_tokens, vocab),
    }
    if controls is not None:
        breakdown['relevance'] = _clamp(
            breakdown['relevance'] + _keyword_position_adjustment(name, keyword_tokens, controls.keyword_position)
        )
    if strategy in (Strategy.VIBE_COMPOUND, Strategy.SEMANTIC_COMPOUND) and vibe:
        breakdown['vibe_fit'] = _clamp(breakdown['vibe_fit'] + 5)

    total = sum(vocab.weights.get(dimension, 0.0) * value for dimension, value in breakdown.items())
    score = round(_clamp(total), 2)

    return BrandabilityScore(
        score=score,
        breakdown=breakdown,
        quality_band=quality_band(score),
        why_tag=_why_tag(name, vibe, keyword_tokens),
        pronounceability=pronounceability,
    )


def satisfies_keyword_constraint(name: str, keyword_tokens: Sequence[str], mode: KeywordInclusion) -> bool:
    if mode == KeywordInclusion.NONE or not keyword_tokens:
        return True
    if mode == KeywordInclusion.EXACT:
        return any(token in name for token in keyword_tokens)
    for token in keyword_tokens:
        if len(token) <= 2:
            if token in name:
                return True
        elif token[:max(2, len(token) - 2)] in name:
            return True
    return False


def score_candidate(candidate: Candidate,
                    industry: Optional[str],
                    vibe: Optional[str],
                    keyword_tokens: Sequence[str],
                    controls: AutoFindControls,
                    concepts: Sequence[Concept] = (),
                    tld: str = "com",
                    vocabulary: Optional[Vocabulary] = None) -> ScoredCandidate:
    vocab = vocabulary or load_vocabulary()
    scored = brandability_score(
        candidate.name, industry, vibe, keyword_tokens, controls, candidate.strategy, tld, vocab,
    )
    meaning = build_meaning_breakdown(candidate.name, candidate.roots, concepts, candidate.strategy, vocab)

    return ScoredCandidate(
        name=candidate.name,
        strategy=candidate.strategy,
        roots=candidate.roots,
        keyword_hits=candidate.keyword_hits,
        score=scored.score,
        score_breakdown=scored.breakdown,
        quality_band=scored.quality_band,
        why_tag=scored.why_tag,
        meaning_breakdown=meaning.breakdown,
        why_it_works=meaning.one_liner,
        meaning_score=meaning.meaning_score,
        pronounceability=scored.pronounceability,
    )


def rank_candidates(candidates: Sequence[Candidate],
                    industry: Optional[str],
                    vibe: Optional[str],
                    keyword_tokens: Sequence[str],
                    controls: AutoFindControls,
                    concepts: Sequence[Concept] = (),
                    tld: str = "com",
                    dedupe: bool = True,
                    vocabulary: Optional[Vocabulary] = None) -> List[ScoredCandidate]:
    """Apply the keyword constraint, score, and sort best-first (ties by name)."""
    vocab = vocabulary or load_vocabulary()
    scored = [
        score_candidate(c, industry, vibe, keyword_tokens, controls, concepts, tld, vocab)
        for c in candidates
        if satisfies_keyword_constraint(c.name, keyword_tokens, controls.must_include_keyword)
    ]
    scored.sort(key=lambda s: (-s.score, s.name))
    return dedupe_by_meaning_diversity(scored) if dedupe else scored
