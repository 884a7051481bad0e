"""Rule-based candidate generation.

A seeded RNG draws roots from the keyword, the industry lexicon, the vibe
flavour and a list of flair morphemes, then combines them with one of several
weighted tactics. Each tactic maps onto one of the public ``Strategy`` values.
Generation is pure: no I/O and identical output for identical input.
"""

import random
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from loguru import logger

from .models import (
    AutoFindControls, Candidate, KeywordInclusion, KeywordPosition, NameStyle, Strategy,
)
from .phonetics import has_vowel
from .vocabulary import IndustryLexicon, Vocabulary, load_vocabulary

_CONSONANTS = set("bcdfghjklmnpqrstvwxyz")
_NON_ALNUM = re.compile(r"[^a-z0-9]")
_TOKEN_SPLIT = re.compile(r"[\s,]+")
_FILLER_TAIL = re.compile(r"(collective|partners|platform|network|service|studio|systems|factory)$")
_TRIPLE = re.compile(r"([a-z])\1{2,}")
_INNER_VOWEL = re.compile(r"([bcdfghjklmnpqrstvwxyz])[aeiou]([bcdfghjklmnpqrstvwxyz])")
_FALLBACK_ROOTS = ("nova", "mint", "halo", "echo", "zen")


@dataclass
class GenerationInput:
    keyword: str
    industry: Optional[str] = None
    vibe: Optional[str] = None
    max_length: int = 10
    controls: AutoFindControls = field(default_factory=AutoFindControls)


@dataclass
class GenerationOptions:
    """Knobs the orchestrator turns while relaxing a search."""
    seed_salt: str = "base"
    mixed_styles: bool = False
    allow_generic_affix: bool = False
    concept_fragments: List[str] = field(default_factory=list)


@dataclass
class GenerationResult:
    candidates: List[Candidate]
    keyword_tokens: List[str]
    related_terms: List[str]


def to_ascii_word(value: str) -> str:
    return _NON_ALNUM.sub("", (value or "").lower())


def tokenise_keywords(keyword: str, vocabulary: Optional[Vocabulary] = None) -> List[str]:
    """Split a keyword phrase into at most six distinct, meaningful tokens."""
    vocab = vocabulary or load_vocabulary()
    parts = (to_ascii_word(part) for part in _TOKEN_SPLIT.split(keyword or ""))
    tokens = [part for part in parts if len(part) >= 2 and part not in vocab.stopwords]
    return list(dict.fromkeys(tokens))[:6]


def industry_lexicon(industry: Optional[str], vocabulary: Vocabulary) -> IndustryLexicon:
    """Industry lexicon merged with the generic terms (``other`` when unset)."""
    source = vocabulary.industry(industry) or vocabulary.industries['other']
    generic = vocabulary.generic

    def merge(a: List[str], b: List[str]) -> List[str]:
        return list(dict.fromkeys(a + b))

    return IndustryLexicon(
        name=source.name,
        roots=merge(source.roots, generic.roots),
        verbs=merge(source.verbs, generic.verbs),
        modifiers=merge(source.modifiers, generic.modifiers),
        prefixes=merge(source.prefixes, generic.prefixes),
        suffixes=merge(source.suffixes, generic.suffixes),
        off_topic=list(source.off_topic),
        hints=list(source.hints),
    )


def expand_related_terms(keyword_tokens: Sequence[str],
                         industry: Optional[str],
                         vocabulary: Optional[Vocabulary] = None) -> List[str]:
    vocab = vocabulary or load_vocabulary()
    lexicon = industry_lexicon(industry, vocab)
    expanded = list(keyword_tokens) + lexicon.roots[:6] + lexicon.modifiers[:4]
    for token in keyword_tokens:
        expanded.extend(to_ascii_word(synonym) for synonym in vocab.thesaurus.get(token, []))
    terms = [term for term in dict.fromkeys(expanded) if len(term) >= 2]
    return terms[:36]


def _is_consonant(ch: str) -> bool:
    return ch in _CONSONANTS


def merge_readable_parts(first: str, second: str) -> str:
    """Join two parts, sharing a repeated boundary letter and softening
    consonant collisions with an 'a'."""
    if not first:
        return second
    if not second:
        return first

    left = first.lower()
    right = second.lower()
    if left[-1] == right[0]:
        right = right[1:]
    if not right:
        return left

    if _is_consonant(left[-1]) and _is_consonant(right[0]):
        return f"{left}a{right}"
    return f"{left}{right}"


def blend_words(first: str, second: str) -> str:
    left = first[:max(2, -(-len(first) * 58 // 100))]
    right = second[max(0, len(second) * 42 // 100):]
    return merge_readable_parts(left, right)


def wordplay_blend(first: str, second: str) -> str:
    if not first:
        return second
    if not second:
        return first

    left = first if len(first) <= 4 else first[:max(3, len(first) - 1)]
    right = second if len(second) <= 4 else second[1:]
    joint = merge_readable_parts(left, right)

    if len(joint) >= 5 and not has_vowel(joint[-2:]):
        return f"{joint}o"
    return joint


def real_word_twist(base: str) -> str:
    clean = to_ascii_word(base)
    if len(clean) <= 3:
        return clean
    if clean.endswith("s"):
        return f"{clean}io"
    if clean.endswith("n"):
        return f"{clean}ly"
    return f"{clean}ry"


def swap_vowel(word: str) -> str:
    vowels = "aeiou"
    chars = list(word)
    for i in range(1, len(chars) - 1):
        if chars[i] in vowels:
            chars[i] = next(v for v in vowels if v != chars[i])
            return "".join(chars)
    return word


def omit_letter(word: str) -> str:
    if len(word) <= 4:
        return word
    cut = len(word) // 2 + (-1 if len(word) > 7 else 0)
    return word[:cut] + word[cut + 1:]


def compact_to_length(name: str, target_length: int) -> str:
    """Shorten ``name`` to ``target_length`` characters.

    Drops a trailing filler word, collapses letter runs, removes inner vowels
    between consonants, and finally truncates.
    """
    if len(name) <= target_length:
        return name

    compacted = _TRIPLE.sub(r"\1", _FILLER_TAIL.sub("", name))
    while len(compacted) > target_length and len(compacted) > 4:
        reduced = _INNER_VOWEL.sub(r"\1\2", compacted, count=1)
        if reduced == compacted:
            break
        compacted = reduced

    return compacted[:target_length]


def keyword_in_position(base: str, keyword: str, position: KeywordPosition, rng: random.Random) -> str:
    if not keyword:
        return base
    if position == KeywordPosition.PREFIX:
        return merge_readable_parts(keyword, base)
    if position == KeywordPosition.SUFFIX:
        return merge_readable_parts(base, keyword)
    if rng.random() > 0.5:
        return merge_readable_parts(keyword, base)
    return merge_readable_parts(base, keyword)


def _pick(items: Sequence[str], rng: random.Random) -> str:
    return items[int(rng.random() * len(items))] if items else ""


def _pick_weighted(items: Sequence[Tuple[str, float]], rng: random.Random) -> str:
    total = sum(weight for _, weight in items)
    cursor = rng.random() * total
    for value, weight in items:
        cursor -= weight
        if cursor <= 0:
            return value
    return items[-1][0]


# tactic -> public strategy
TACTIC_STRATEGY: Dict[str, Strategy] = {
    'two_word_compound': Strategy.COMPOUND,
    'semantic_compound': Strategy.SEMANTIC_COMPOUND,
    'wordplay_blend': Strategy.INVENTED_BLEND,
    'emotive_modifier': Strategy.PREFIX_ROOT,
    'action_noun': Strategy.PREFIX_ROOT,
    'root_suffix': Strategy.SUFFIX_ROOT,
    'prefix_root': Strategy.PREFIX_ROOT,
    'vibe_compound': Strategy.VIBE_COMPOUND,
    'portmanteau': Strategy.INVENTED_BLEND,
    'soft_connector_blend': Strategy.INVENTED_BLEND,
    'real_word_twist': Strategy.INVENTED_BLEND,
    'vowel_swap': Strategy.INVENTED_BLEND,
    'letter_omission': Strategy.INVENTED_BLEND,
    'mood_pairing': Strategy.VIBE_COMPOUND,
}


def tactic_weights(style: Optional[NameStyle], prefer_two_word: bool) -> List[Tuple[str, float]]:
    """Weighted tactic table; ``style=None`` means a mixed pool."""
    two_word = 2.6 if prefer_two_word else 1.2
    weights = [
        ('two_word_compound', two_word),
        ('semantic_compound', 1.6),
        ('wordplay_blend', 1.3),
        ('emotive_modifier', 1.35),
        ('action_noun', 1.15),
        ('root_suffix', 1.25),
        ('prefix_root', 1.1),
        ('vibe_compound', 1.8),
        ('portmanteau', 0.8 if prefer_two_word else 1.5),
        ('soft_connector_blend', 1.2),
        ('real_word_twist', 1.15),
        ('vowel_swap', 0.65),
        ('letter_omission', 0.55),
        ('mood_pairing', 1.1),
    ]
    if style is None:
        return weights

    invented_factor = 1.8 if style == NameStyle.BRANDABLE_BLENDS else 0.5
    return [
        (tactic, weight * invented_factor if TACTIC_STRATEGY[tactic] == Strategy.INVENTED_BLEND else weight)
        for tactic, weight in weights
    ]


@dataclass
class _Parts:
    root_a: str
    root_b: str
    verb: str
    modifier: str
    prefix: str
    suffix: str
    noun: str


def _combine(tactic: str, p: _Parts, blend: bool, rng: random.Random) -> Tuple[str, List[str]]:
    join: Callable[[str, str], str] = blend_words if blend else merge_readable_parts

    if tactic == 'two_word_compound':
        return merge_readable_parts(p.root_a, p.root_b), [p.root_a, p.root_b]
    if tactic == 'semantic_compound':
        return join(p.root_a, p.root_b), [p.root_a, p.root_b]
    if tactic == 'wordplay_blend':
        return wordplay_blend(p.root_a, p.root_b), [p.root_a, p.root_b]
    if tactic == 'emotive_modifier':
        return merge_readable_parts(p.modifier, p.root_a), [p.modifier, p.root_a]
    if tactic == 'action_noun':
        return merge_readable_parts(p.verb, p.root_a), [p.verb, p.root_a]
    if tactic == 'root_suffix':
        return join(p.root_a, p.suffix), [p.root_a, p.suffix]
    if tactic == 'prefix_root':
        return join(p.prefix, p.root_a), [p.prefix, p.root_a]
    if tactic == 'vibe_compound':
        return merge_readable_parts(p.noun, p.root_a), [p.noun, p.root_a]
    if tactic == 'portmanteau':
        return blend_words(p.root_a, p.root_b), [p.root_a, p.root_b]
    if tactic == 'soft_connector_blend':
        connector = _pick("aeiou", rng)
        tail = p.root_b[min(2, max(1, len(p.root_b) - 3)):]
        return f"{p.root_a}{connector}{tail}", [p.root_a, p.root_b]
    if tactic == 'real_word_twist':
        return real_word_twist(p.root_a), [p.root_a]
    if tactic == 'vowel_swap':
        return swap_vowel(join(p.root_a, p.root_b)), [p.root_a, p.root_b]
    if tactic == 'letter_omission':
        source = blend_words(p.root_a, p.root_b) if blend else merge_readable_parts(p.verb, p.root_a)
        return omit_letter(source), [p.verb, p.root_a, p.root_b]
    return merge_readable_parts(p.modifier, p.noun), [p.modifier, p.noun]


def generate_candidates(gen_input: GenerationInput,
                        pool_size: int = 700,
                        options: Optional[GenerationOptions] = None,
                        vocabulary: Optional[Vocabulary] = None) -> GenerationResult:
    """Build a deterministic pool of unique candidate names."""
    vocab = vocabulary or load_vocabulary()
    options = options or GenerationOptions()
    controls = gen_input.controls

    keyword_tokens = tokenise_keywords(gen_input.keyword, vocab)
    lexicon = industry_lexicon(gen_input.industry, vocab)
    related_terms = expand_related_terms(keyword_tokens, gen_input.industry, vocab)
    vibe_flavor = vocab.vibe(gen_input.vibe)
    flavor = vibe_flavor or vocab.vibes['minimal']

    style: Optional[NameStyle] = None if options.mixed_styles else controls.style
    style_label = style.value if style else "mixed"
    if style is None:
        style_suffixes = vocab.style_suffixes['real_words'] + vocab.style_suffixes['brandable_blends']
    else:
        style_suffixes = vocab.style_suffixes[style.value]

    target_length = max(3, min(gen_input.max_length, 24))
    pool_size = max(240, min(1800, pool_size))

    seed_base = controls.seed or f"{gen_input.keyword}:{gen_input.industry or 'other'}:{gen_input.vibe or 'default'}"
    rng = random.Random(f"{seed_base}:{style_label}:{target_length}:{options.seed_salt}")

    concept_fragments = [f for f in (to_ascii_word(c) for c in options.concept_fragments) if f]
    build_tokens = [t for t in (to_ascii_word(term) for term in keyword_tokens + related_terms) if t]
    base_roots = list(dict.fromkeys(
        concept_fragments + build_tokens + lexicon.roots + vocab.flair_morphemes
    ))[:100]
    short_roots = [root for root in base_roots if len(root) <= max(4, target_length - 2)]
    primary_roots = short_roots if len(short_roots) >= 10 else base_roots

    vibe_modifiers = vibe_flavor.modifiers if vibe_flavor else []
    modifiers = list(dict.fromkeys(lexicon.modifiers + vibe_modifiers + flavor.flavor_modifiers))
    prefixes = list(dict.fromkeys(lexicon.prefixes + flavor.prefixes))
    suffixes = list(dict.fromkeys(lexicon.suffixes + flavor.suffixes + style_suffixes))
    nouns = list(dict.fromkeys(
        flavor.nouns + vocab.flair_morphemes + related_terms[:12] + concept_fragments
    ))
    weights = tactic_weights(style, controls.prefer_two_word_brands)
    keyword_mode = controls.must_include_keyword
    collisions = vocab.generator_collisions

    candidates: Dict[str, Candidate] = {}

    def try_add(name: str, strategy: Strategy, roots: List[str]) -> None:
        if len(name) < 3 or name in candidates:
            return
        if any(collision in name for collision in collisions):
            return
        hits = frozenset(token for token in keyword_tokens if token in name)
        candidates[name] = Candidate(name=name, strategy=strategy, roots=tuple(roots), keyword_hits=hits)

    guard = 0
    while len(candidates) < pool_size and guard < pool_size * 12:
        guard += 1

        keyword_root = _pick(keyword_tokens, rng)
        parts = _Parts(
            root_a=_pick(primary_roots, rng),
            root_b=_pick(base_roots, rng),
            verb=_pick(lexicon.verbs, rng),
            modifier=_pick(modifiers, rng),
            prefix=_pick(prefixes, rng),
            suffix=_pick(suffixes, rng),
            noun=_pick(nouns, rng),
        )
        if style is None:
            blend = rng.random() < 0.5
        else:
            blend = style == NameStyle.BRANDABLE_BLENDS
        tactic = _pick_weighted(weights, rng)

        built, roots = _combine(tactic, parts, blend, rng)
        if not built:
            continue

        if controls.allow_vibe_suffix and rng.random() > 0.78:
            built = merge_readable_parts(built, _pick(vocab.tasteful_suffixes, rng))

        required = ""
        if keyword_root and keyword_mode == KeywordInclusion.EXACT:
            built = keyword_in_position(built, keyword_root, controls.keyword_position, rng)
            roots = [keyword_root] + roots
            required = keyword_root
        elif keyword_root and keyword_mode == KeywordInclusion.PARTIAL and rng.random() > 0.35:
            partial = keyword_root[:-1] if len(keyword_root) > 4 else keyword_root
            built = keyword_in_position(built, partial, controls.keyword_position, rng)
            roots = [partial] + roots

        name = compact_to_length(to_ascii_word(built), target_length)
        if required and required not in name:
            continue
        try_add(name, TACTIC_STRATEGY[tactic], roots)

        if (options.allow_generic_affix and keyword_mode != KeywordInclusion.EXACT
                and len(candidates) < pool_size and rng.random() > 0.82):
            affix = _pick(vocab.tasteful_suffixes, rng)
            relaxed = compact_to_length(to_ascii_word(merge_readable_parts(parts.root_a, affix)), target_length)
            try_add(relaxed, Strategy.SUFFIX_ROOT, [parts.root_a, affix])

    pool = list(candidates.values())

    if style != NameStyle.BRANDABLE_BLENDS and not any(has_vowel(c.name) for c in pool):
        # exact mode may only fall back to a keyword token that fits
        if keyword_mode == KeywordInclusion.EXACT:
            fallback_roots, default = list(keyword_tokens), None
        else:
            fallback_roots, default = base_roots + list(_FALLBACK_ROOTS), _FALLBACK_ROOTS[0][:target_length]
        fallback = next(
            (root for root in fallback_roots if has_vowel(root) and 3 <= len(root) <= target_length),
            default,
        )
    else:
        fallback = None

    if fallback:
        logger.debug(f"Pool had no vowel-bearing name, adding fallback '{fallback}'")
        pool.append(Candidate(
            name=fallback,
            strategy=Strategy.COMPOUND,
            roots=(fallback,),
            keyword_hits=frozenset(t for t in keyword_tokens if t in fallback),
        ))

    logger.debug(
        f"Generated {len(pool)} candidates for '{gen_input.keyword}' "
        f"(style={style_label}, max_length={target_length}, salt={options.seed_salt})"
    )
    return GenerationResult(candidates=pool, keyword_tokens=keyword_tokens, related_terms=related_terms)
