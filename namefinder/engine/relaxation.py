"""Ordered relaxation menu for searches that fall short of their target."""

from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Optional

from .models import AutoFindControls, KeywordInclusion, RelaxationStep


@dataclass
class SearchParameters:
    """Effective knobs for one attempt; relaxations produce new instances."""
    max_length: int
    controls: AutoFindControls = field(default_factory=AutoFindControls)
    expanded_concepts: bool = False
    mixed_styles: bool = False
    allow_generic_affix: bool = False


@dataclass(frozen=True)
class Relaxation:
    id: str
    label: str
    applicable: Callable[[SearchParameters, int], bool]
    apply: Callable[[SearchParameters, int], SearchParameters]


def _with_controls(params: SearchParameters, **changes) -> SearchParameters:
    return replace(params, controls=replace(params.controls, **changes))


def _grow(params: SearchParameters, cap: int) -> int:
    return min(cap, params.max_length + 1)


RELAXATIONS: List[Relaxation] = [
    Relaxation(
        id="length_plus1",
        label="Maximum length increased by 1 character",
        applicable=lambda p, cap: p.max_length < cap,
        apply=lambda p, cap: replace(p, max_length=_grow(p, cap)),
    ),
    Relaxation(
        id="keyword_partial",
        label="Keyword inclusion relaxed from exact to partial",
        applicable=lambda p, cap: p.controls.must_include_keyword == KeywordInclusion.EXACT,
        apply=lambda p, cap: _with_controls(p, must_include_keyword=KeywordInclusion.PARTIAL),
    ),
    Relaxation(
        id="allow_suffix",
        label="Vibe-themed suffixes allowed",
        applicable=lambda p, cap: not p.controls.allow_vibe_suffix,
        apply=lambda p, cap: _with_controls(p, allow_vibe_suffix=True),
    ),
    Relaxation(
        id="expand_concepts",
        label="Expanded meaning concept set",
        applicable=lambda p, cap: not p.expanded_concepts,
        apply=lambda p, cap: replace(p, expanded_concepts=True),
    ),
    Relaxation(
        id="length_plus2_two_word",
        label="Maximum length increased by 1 more character and two-word mode enabled",
        applicable=lambda p, cap: p.max_length < cap or not p.controls.prefer_two_word_brands,
        apply=lambda p, cap: replace(
            _with_controls(p, prefer_two_word_brands=True), max_length=_grow(p, cap)
        ),
    ),
    Relaxation(
        id="mixed_style",
        label="Style widened to mix real words and blends",
        applicable=lambda p, cap: not p.mixed_styles,
        apply=lambda p, cap: replace(p, mixed_styles=True),
    ),
    Relaxation(
        id="keyword_none",
        label="Keyword inclusion requirement removed",
        applicable=lambda p, cap: p.controls.must_include_keyword != KeywordInclusion.NONE,
        apply=lambda p, cap: _with_controls(p, must_include_keyword=KeywordInclusion.NONE),
    ),
    Relaxation(
        id="generic_affix",
        label="Generic affix fallback enabled",
        applicable=lambda p, cap: not p.allow_generic_affix,
        apply=lambda p, cap: replace(p, allow_generic_affix=True),
    ),
]


class RelaxationLadder:
    """Walks the relaxation menu in order, each step used at most once.

    Steps that would not change the current parameters are skipped and
    recorded as not applied.
    """

    def __init__(self, max_length_cap: int = 24, menu: Optional[List[Relaxation]] = None):
        self.max_length_cap = max_length_cap
        self.menu = list(menu if menu is not None else RELAXATIONS)
        self.steps: Dict[str, RelaxationStep] = {
            r.id: RelaxationStep(id=r.id, label=r.label) for r in self.menu
        }
        self._cursor = 0

    def relax(self, params: SearchParameters) -> Optional[SearchParameters]:
        """Apply the next applicable step; ``None`` when the menu is exhausted."""
        while self._cursor < len(self.menu):
            relaxation = self.menu[self._cursor]
            self._cursor += 1
            if relaxation.applicable(params, self.max_length_cap):
                self.steps[relaxation.id].applied = True
                return relaxation.apply(params, self.max_length_cap)
        return None

    @property
    def applied_labels(self) -> List[str]:
        return [self.steps[r.id].label for r in self.menu if self.steps[r.id].applied]
