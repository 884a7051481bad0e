"""Data models for the name-discovery engine."""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import List, Dict, Any, Optional, Tuple, FrozenSet

from .errors import RequestValidationError


class KeywordInclusion(Enum):
    """How literally the keyword must appear in a name."""
    EXACT = "exact"
    PARTIAL = "partial"
    NONE = "none"


class KeywordPosition(Enum):
    """Where an injected keyword goes."""
    PREFIX = "prefix"
    SUFFIX = "suffix"
    ANYWHERE = "anywhere"


class NameStyle(Enum):
    """Real-word compounds or invented blends."""
    REAL_WORDS = "real_words"
    BRANDABLE_BLENDS = "brandable_blends"


class Strategy(Enum):
    """How a candidate was assembled from its roots."""
    PREFIX_ROOT = "prefix_root"
    SUFFIX_ROOT = "suffix_root"
    COMPOUND = "compound"
    VIBE_COMPOUND = "vibe_compound"
    SEMANTIC_COMPOUND = "semantic_compound"
    INVENTED_BLEND = "invented_blend"


class QualityBand(Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Confidence(Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RunState(Enum):
    """States of one orchestrator invocation."""
    GENERATING = "generating"
    FILTERING = "filtering"
    SCORING = "scoring"
    CHECKING = "checking"
    ACCEPTING = "accepting"
    RELAXING = "relaxing"
    DONE = "done"


class Termination(Enum):
    """Why a run reached DONE."""
    TARGET_MET = "target_met"
    ATTEMPTS_EXHAUSTED = "attempts_exhausted"
    TIME_CAP = "time_cap"
    ABORTED = "aborted"
    INVALID_REQUEST = "invalid_request"


def _enum_value(enum_cls, value, default):
    if value is None:
        return default
    if isinstance(value, enum_cls):
        return value
    return enum_cls(str(value).strip().lower())


@dataclass
class AutoFindControls:
    """Style and inclusion controls supplied with a request."""
    seed: Optional[str] = None
    must_include_keyword: KeywordInclusion = KeywordInclusion.PARTIAL
    keyword_position: KeywordPosition = KeywordPosition.ANYWHERE
    style: NameStyle = NameStyle.REAL_WORDS
    blocklist: List[str] = field(default_factory=list)
    allowlist: List[str] = field(default_factory=list)
    allow_hyphen: bool = False
    allow_numbers: bool = False
    prefer_two_word_brands: bool = False
    allow_vibe_suffix: bool = False
    show_any_available: bool = False
    meaning_first: bool = True

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "AutoFindControls":
        """Build controls from a loosely typed payload (strings for enums)."""
        data = dict(data or {})
        return cls(
            seed=data.get("seed") or None,
            must_include_keyword=_enum_value(
                KeywordInclusion, data.get("must_include_keyword"), KeywordInclusion.PARTIAL
            ),
            keyword_position=_enum_value(
                KeywordPosition, data.get("keyword_position"), KeywordPosition.ANYWHERE
            ),
            style=_enum_value(NameStyle, data.get("style"), NameStyle.REAL_WORDS),
            blocklist=list(data.get("blocklist") or []),
            allowlist=list(data.get("allowlist") or []),
            allow_hyphen=bool(data.get("allow_hyphen", False)),
            allow_numbers=bool(data.get("allow_numbers", False)),
            prefer_two_word_brands=bool(data.get("prefer_two_word_brands", False)),
            allow_vibe_suffix=bool(data.get("allow_vibe_suffix", False)),
            show_any_available=bool(data.get("show_any_available", False)),
            meaning_first=bool(data.get("meaning_first", True)),
        )


@dataclass
class AutoFindRequest:
    """Inbound search request."""
    keyword: str
    industry: Optional[str] = None
    vibe: Optional[str] = None
    max_length: int = 10
    target_count: int = 5
    controls: AutoFindControls = field(default_factory=AutoFindControls)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AutoFindRequest":
        """Parse an inbound payload; malformed fields raise RequestValidationError."""
        try:
            return cls(
                keyword=str(data.get("keyword") or ""),
                industry=data.get("industry") or None,
                vibe=data.get("vibe") or None,
                max_length=int(data.get("max_length", 10)),
                target_count=int(data.get("target_count", 5)),
                controls=AutoFindControls.from_dict(data.get("controls")),
            )
        except (AttributeError, TypeError, ValueError) as e:
            raise RequestValidationError([f"malformed request: {e}"]) from e


@dataclass(frozen=True)
class Candidate:
    """A generated name with provenance."""
    name: str
    strategy: Strategy
    roots: Tuple[str, ...] = ()
    keyword_hits: FrozenSet[str] = frozenset()


@dataclass
class FilterDecision:
    accepted: bool
    reasons: List[str] = field(default_factory=list)


@dataclass
class MeaningBreakdown:
    """Human-readable explanation of where a name comes from."""
    breakdown: str
    one_liner: str
    meaning_score: int
    fragments: List[str] = field(default_factory=list)
    phonetic: bool = False


@dataclass
class ScoredCandidate:
    """A candidate with its brandability score and meaning."""
    name: str
    strategy: Strategy
    roots: Tuple[str, ...]
    keyword_hits: FrozenSet[str]
    score: float
    score_breakdown: Dict[str, float]
    quality_band: QualityBand
    why_tag: Optional[str] = None
    meaning_breakdown: str = ""
    why_it_works: str = ""
    meaning_score: int = 0
    pronounceability: int = 0
    domain: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'domain': self.domain,
            'strategy': self.strategy.value,
            'roots': list(self.roots),
            'keyword_hits': sorted(self.keyword_hits),
            'score': self.score,
            'score_breakdown': dict(self.score_breakdown),
            'quality_band': self.quality_band.value,
            'why_tag': self.why_tag,
            'meaning_breakdown': self.meaning_breakdown,
            'why_it_works': self.why_it_works,
            'meaning_score': self.meaning_score,
        }


@dataclass
class AvailabilityCheckResult:
    """Availability verdict for one fully-qualified domain."""
    domain: str
    available: bool
    provider: str
    latency_ms: float
    confidence: Confidence
    cached: bool = False
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['confidence'] = self.confidence.value
        return data


@dataclass
class RelaxationStep:
    id: str
    label: str
    applied: bool = False


@dataclass
class NearMissOption:
    """A name taken on the target TLD but free elsewhere."""
    name: str
    available_tlds: List[str] = field(default_factory=list)


@dataclass
class AutoFindRunSummary:
    """Diagnostics for one orchestrator run."""
    found: int = 0
    target: int = 0
    attempts: int = 0
    max_attempts: int = 0
    generated_candidates: int = 0
    passed_filters: int = 0
    checked_availability: int = 0
    provider_errors: int = 0
    availability_hit_rate: float = 0.0
    quality_threshold: float = 0.0
    meaning_floor: float = 0.0
    relaxations_applied: List[str] = field(default_factory=list)
    top_rejected_reasons: List[Tuple[str, int]] = field(default_factory=list)
    checking_progress: str = ""
    suggestions: List[str] = field(default_factory=list)
    near_misses: List[NearMissOption] = field(default_factory=list)
    explanation: str = ""
    elapsed_ms: float = 0.0
    terminated_by: Termination = Termination.ATTEMPTS_EXHAUSTED
    validation_errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['terminated_by'] = self.terminated_by.value
        data['top_rejected_reasons'] = [
            {'reason': reason, 'count': count}
            for reason, count in self.top_rejected_reasons
        ]
        return data


@dataclass
class AutoFindResult:
    picks: List[ScoredCandidate]
    summary: AutoFindRunSummary

    def to_dict(self) -> Dict[str, Any]:
        return {
            'picks': [pick.to_dict() for pick in self.picks],
            'summary': self.summary.to_dict(),
        }
