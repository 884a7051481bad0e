"""In-process name-discovery engine."""

from .availability import AvailabilityCache, AvailabilityResolver, DnsOverHttpsProvider, RdapProvider
from .config import AutoFindSettings, ResolverConfig, SearchConfig
from .errors import NameFinderError, ProviderError, RequestValidationError, VocabularyError
from .filters import evaluate_candidate
from .generator import GenerationInput, GenerationOptions, generate_candidates
from .models import (
    AutoFindControls, AutoFindRequest, AutoFindResult, AutoFindRunSummary, AvailabilityCheckResult,
    Candidate, FilterDecision, KeywordInclusion, KeywordPosition, NameStyle, ScoredCandidate,
    Strategy, Termination,
)
from .orchestrator import AutoFindOrchestrator
from .scoring import brandability_score, rank_candidates

__all__ = [
    'AutoFindControls',
    'AutoFindOrchestrator',
    'AutoFindRequest',
    'AutoFindResult',
    'AutoFindRunSummary',
    'AutoFindSettings',
    'AvailabilityCache',
    'AvailabilityCheckResult',
    'AvailabilityResolver',
    'Candidate',
    'DnsOverHttpsProvider',
    'FilterDecision',
    'GenerationInput',
    'GenerationOptions',
    'KeywordInclusion',
    'KeywordPosition',
    'NameFinderError',
    'NameStyle',
    'ProviderError',
    'RdapProvider',
    'RequestValidationError',
    'ResolverConfig',
    'ScoredCandidate',
    'SearchConfig',
    'Strategy',
    'Termination',
    'VocabularyError',
    'brandability_score',
    'evaluate_candidate',
    'generate_candidates',
    'rank_candidates',
]
