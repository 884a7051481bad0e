"""Heuristic vocabulary tables (lexicons, morphemes, scoring tables).

The tables live in ``data/vocabulary.yaml`` and are loaded once per process.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from loguru import logger

from .errors import VocabularyError

DEFAULT_PATH = Path(__file__).parent / "data" / "vocabulary.yaml"

_REQUIRED_SECTIONS = (
    'stopwords', 'generic_terms', 'industries', 'thesaurus', 'vibes',
    'flair_morphemes', 'tasteful_suffixes', 'style_suffixes', 'morphemes',
    'filters', 'scoring',
)


@dataclass
class IndustryLexicon:
    name: str
    roots: List[str] = field(default_factory=list)
    verbs: List[str] = field(default_factory=list)
    modifiers: List[str] = field(default_factory=list)
    prefixes: List[str] = field(default_factory=list)
    suffixes: List[str] = field(default_factory=list)
    off_topic: List[str] = field(default_factory=list)
    hints: List[str] = field(default_factory=list)

    def terms(self) -> List[str]:
        """Roots, prefixes and suffixes in table order, without duplicates."""
        return list(dict.fromkeys(self.roots + self.prefixes + self.suffixes))


@dataclass
class VibeFlavor:
    name: str
    modifiers: List[str] = field(default_factory=list)
    flavor_modifiers: List[str] = field(default_factory=list)
    prefixes: List[str] = field(default_factory=list)
    suffixes: List[str] = field(default_factory=list)
    nouns: List[str] = field(default_factory=list)
    hints: List[str] = field(default_factory=list)

    def terms(self) -> List[str]:
        return list(dict.fromkeys(
            self.modifiers + self.prefixes + self.suffixes + self.nouns + self.hints
        ))


def normalise_key(value: Optional[str]) -> str:
    """Lower-case a lookup key and collapse separators ("Health-and-Wellness")."""
    if not value:
        return ""
    text = value.strip().lower().replace(" and ", " & ")
    text = re.sub(r"[\s_\-]+", " ", text)
    return text.strip()


class Vocabulary:
    """Typed view over the vocabulary tables."""

    def __init__(self, data: Dict):
        missing = [section for section in _REQUIRED_SECTIONS if section not in data]
        if missing:
            raise VocabularyError(f"vocabulary is missing sections: {', '.join(missing)}")

        self.stopwords = set(data['stopwords'])
        self.generic = IndustryLexicon(name='generic', **data['generic_terms'])
        self.industries: Dict[str, IndustryLexicon] = {
            normalise_key(name): IndustryLexicon(name=name, **entry)
            for name, entry in data['industries'].items()
        }
        self.thesaurus: Dict[str, List[str]] = dict(data['thesaurus'])
        self.vibes: Dict[str, VibeFlavor] = {
            normalise_key(name): VibeFlavor(name=name, **entry)
            for name, entry in data['vibes'].items()
        }
        self.flair_morphemes: List[str] = list(data['flair_morphemes'])
        self.tasteful_suffixes: List[str] = list(data['tasteful_suffixes'])
        self.style_suffixes: Dict[str, List[str]] = dict(data['style_suffixes'])
        self.morphemes: Dict[str, str] = dict(data['morphemes'])

        filters = data['filters']
        self.banned_clusters: List[str] = list(filters['banned_clusters'])
        self.visual_ambiguity: List[str] = list(filters['visual_ambiguity'])
        self.trademark_fragments: List[str] = list(filters['trademark_fragments'])
        self.generator_collisions: List[str] = list(filters.get('generator_collisions', []))

        scoring = data['scoring']
        self.weights: Dict[str, float] = dict(scoring['weights'])
        self.tld_strength: Dict[str, int] = dict(scoring['tld_strength'])
        self.default_tld_strength: int = int(scoring.get('default_tld_strength', 40))
        self.known_brands: List[str] = list(scoring['known_brands'])
        self.hub_brands: List[str] = list(scoring['hub_brands'])
        self.dictionary_words = set(scoring['dictionary_words'])
        self.generic_prefixes: List[str] = list(scoring['generic_prefixes'])
        self.generic_suffixes: List[str] = list(scoring['generic_suffixes'])
        self.trendy_suffixes: List[str] = list(scoring['trendy_suffixes'])
        self.ambiguous_runs: List[str] = list(scoring['ambiguous_runs'])

        self._generic_terms = set(self.generic.terms())
        self._warned: set = set()

    def industry(self, name: Optional[str]) -> Optional[IndustryLexicon]:
        """Look up an industry lexicon; unknown names fall back to ``other``."""
        key = normalise_key(name)
        if not key:
            return None
        if key in self.industries:
            return self.industries[key]
        for known, lexicon in self.industries.items():
            if key in known.split(" & ") or known.startswith(key):
                return lexicon
        if key not in self._warned:
            self._warned.add(key)
            logger.warning(f"Unknown industry '{name}', using generic lexicon")
        return self.industries.get('other')

    def vibe(self, name: Optional[str]) -> Optional[VibeFlavor]:
        key = normalise_key(name)
        if not key:
            return None
        flavor = self.vibes.get(key)
        if flavor is None and key not in self._warned:
            self._warned.add(key)
            logger.warning(f"Unknown vibe '{name}', ignoring")
        return flavor

    def is_generic(self, term: str) -> bool:
        return term in self._generic_terms


_cache: Dict[Path, Vocabulary] = {}


def load_vocabulary(path: Optional[Path] = None) -> Vocabulary:
    """Load (and memoise) the vocabulary tables from ``path``."""
    resolved = Path(path or DEFAULT_PATH).resolve()
    if resolved in _cache:
        return _cache[resolved]

    logger.debug(f"Loading vocabulary from: {resolved}")
    try:
        with open(resolved, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise VocabularyError(f"cannot read vocabulary {resolved}: {e}") from e

    if not isinstance(data, dict):
        raise VocabularyError(f"vocabulary {resolved} is not a mapping")

    vocabulary = Vocabulary(data)
    _cache[resolved] = vocabulary
    return vocabulary
