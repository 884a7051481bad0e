"""Concept mapping, meaning breakdowns and meaning-diversity dedupe."""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, TypeVar

from .generator import to_ascii_word, tokenise_keywords
from .models import MeaningBreakdown, Strategy
from .phonetics import pronounceability_score
from .vocabulary import Vocabulary, load_vocabulary

KEYWORD_MEANING = "core keyword"
_BASE_WEIGHT = 0.4


@dataclass(frozen=True)
class Concept:
    fragment: str
    meaning: str


def _match_strength(fragment: str, token: str) -> float:
    if fragment == token:
        return 1.0
    if fragment.startswith(token) or token.startswith(fragment):
        return 0.82
    if fragment in token or token in fragment:
        return 0.68
    return 0.0


def _unique(concepts: Iterable[Concept]) -> List[Concept]:
    seen: Dict[str, Concept] = {}
    for concept in concepts:
        seen.setdefault(concept.fragment, concept)
    return list(seen.values())


def build_concepts(keyword: str,
                   industry: Optional[str] = None,
                   vibe: Optional[str] = None,
                   limit: int = 8,
                   expanded: bool = False,
                   vocabulary: Optional[Vocabulary] = None) -> List[Concept]:
    """Pick the morphemes that best express the request.

    Keyword tokens always come first (with their table meaning when they
    have one), followed by table entries ranked by how well they match the
    keyword, its synonyms, and the industry and vibe hints.
    """
    vocab = vocabulary or load_vocabulary()
    limit = max(3, min(limit, 16))
    tokens = tokenise_keywords(keyword, vocab)

    expansion = list(tokens)
    for token in tokens:
        expansion.extend(to_ascii_word(s) for s in vocab.thesaurus.get(token, []))
    expansion = list(dict.fromkeys(t for t in expansion if t))

    lexicon = vocab.industry(industry)
    flavor = vocab.vibe(vibe)
    industry_hints = lexicon.hints if lexicon else []
    vibe_hints = flavor.hints if flavor else []

    scored = []
    for fragment, meaning in vocab.morphemes.items():
        score = _BASE_WEIGHT + sum(_match_strength(fragment, token) for token in expansion)
        if fragment in industry_hints:
            score += 0.85
        if fragment in vibe_hints:
            score += 0.75
        if score >= 0.9:
            scored.append((score, fragment, meaning))
    scored.sort(key=lambda item: (-item[0], item[1]))

    keyword_concepts = [Concept(t, vocab.morphemes.get(t, KEYWORD_MEANING)) for t in tokens]
    selected = _unique(keyword_concepts + [Concept(f, m) for _, f, m in scored])

    if len(selected) < limit:
        for hint in industry_hints + vibe_hints:
            if hint in vocab.morphemes:
                selected.append(Concept(hint, vocab.morphemes[hint]))
        selected = _unique(selected)

    if expanded and len(selected) < limit:
        selected = _unique(selected + [Concept(f, m) for f, m in vocab.morphemes.items()])

    # keyword tokens are never trimmed away
    return selected[:max(limit, len(keyword_concepts))]


def _find_fragments(name: str,
                    roots: Sequence[str],
                    concepts: Sequence[Concept],
                    vocab: Vocabulary) -> List[Concept]:
    by_fragment = {concept.fragment: concept for concept in concepts}
    found: List[Concept] = []
    for root in roots:
        root = to_ascii_word(root)
        if len(root) < 2 or root not in name:
            continue
        if root in by_fragment:
            found.append(by_fragment[root])
        elif root in vocab.morphemes:
            found.append(Concept(root, vocab.morphemes[root]))
    found.extend(concept for concept in concepts if len(concept.fragment) >= 2 and concept.fragment in name)
    return _unique(found)[:4]


def _phonetic_split(name: str) -> int:
    for i in range(2, len(name) - 1):
        if name[i - 1] in "aeiouy" and name[i] not in "aeiouy":
            return i + 1 if i + 1 < len(name) else i
    return max(1, len(name) // 2)


def build_meaning_breakdown(name: str,
                            roots: Sequence[str],
                            concepts: Sequence[Concept],
                            strategy: Optional[Strategy] = None,
                            vocabulary: Optional[Vocabulary] = None) -> MeaningBreakdown:
    """Explain where ``name`` comes from and how much meaning it carries."""
    vocab = vocabulary or load_vocabulary()
    name = to_ascii_word(name)
    matched = _find_fragments(name, roots, concepts, vocab)

    coverage = min(1.0, sum(len(c.fragment) for c in matched) / max(len(name), 1))
    in_dictionary = 1 if any(c.fragment in vocab.dictionary_words for c in matched) else 0
    pronounceability = pronounceability_score(name)
    if len(matched) >= 2:
        power = 1.0
    elif len(matched) == 1:
        power = 0.55
    else:
        power = 0.2

    meaning_score = int(round(max(0.0, min(100.0,
        coverage * 38 + in_dictionary * 14 + pronounceability / 100 * 24 + power * 24
    ))))

    if strategy == Strategy.INVENTED_BLEND or not matched:
        split = _phonetic_split(name)
        texture = "smooth, easy" if pronounceability >= 75 else "distinctive"
        return MeaningBreakdown(
            breakdown=f"{name[:split]} + {name[split:]} -> {name} (phonetic blend)",
            one_liner=f"{name} is an invented name picked for its {texture} sound rather than a dictionary meaning.",
            meaning_score=meaning_score,
            fragments=[c.fragment for c in matched],
            phonetic=True,
        )

    parts = [f"{c.fragment} ({c.meaning})" for c in matched[:3]]
    lead = matched[0]
    if len(matched) >= 2:
        second = matched[1]
        one_liner = f"{lead.fragment} + {second.fragment} signals {lead.meaning} with {second.meaning}."
    else:
        one_liner = f"{lead.fragment} gives a clear {lead.meaning} cue in a {len(name)}-letter name."

    return MeaningBreakdown(
        breakdown=f"{' + '.join(parts)} -> {name}",
        one_liner=one_liner,
        meaning_score=meaning_score,
        fragments=[c.fragment for c in matched],
        phonetic=False,
    )


def levenshtein(a: str, b: str) -> int:
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, 1):
        current = [i]
        for j, cb in enumerate(b, 1):
            current.append(min(
                previous[j] + 1,
                current[j - 1] + 1,
                previous[j - 1] + (ca != cb),
            ))
        previous = current
    return previous[-1]


def root_signature(roots: Sequence[str]) -> str:
    cleaned = sorted(r for r in (to_ascii_word(root) for root in roots) if r)
    return "|".join(cleaned)


T = TypeVar('T')


def dedupe_by_meaning_diversity(items: Sequence[T]) -> List[T]:
    """Keep the first of each root signature and drop near-identical names.

    Items need ``name`` and ``roots`` attributes. Input order is preserved,
    so callers pass ranked lists and keep the best of each cluster.
    """
    kept: List[T] = []
    signatures = set()

    for item in items:
        name = to_ascii_word(item.name)
        signature = root_signature(item.roots)
        if signature and signature in signatures:
            continue

        too_close = any(
            picked_name[:1] == name[:1] and levenshtein(picked_name, name) <= 1
            for picked_name in (to_ascii_word(p.name) for p in kept)
        )
        if too_close:
            continue

        kept.append(item)
        if signature:
            signatures.add(signature)

    return kept
