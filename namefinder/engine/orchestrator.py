"""AutoFind orchestration: generate, filter, score, check, relax.

This module drives the search loop:
- Seeded candidate generation per attempt
- Structural filtering with rejection diagnostics
- Ranking with quality and meaning gates
- One bounded availability batch per attempt
- Cumulative relaxation when the target is not met
"""

import asyncio
import time
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional

from loguru import logger

from .availability.providers import ABORTED
from .availability.resolver import AvailabilityResolver
from .config import AutoFindSettings
from .errors import RequestValidationError
from .filters import evaluate_candidate, normalise_terms, top_rejected_reasons
from .generator import GenerationInput, GenerationOptions, GenerationResult, generate_candidates, tokenise_keywords
from .meaning import build_concepts
from .models import (
    AutoFindRequest, AutoFindResult, AutoFindRunSummary, Candidate, NearMissOption, RunState,
    ScoredCandidate, Termination,
)
from .relaxation import RelaxationLadder, SearchParameters
from .scoring import rank_candidates
from .vocabulary import Vocabulary, load_vocabulary

Generator = Callable[..., GenerationResult]


def validate_request(request: AutoFindRequest, vocabulary: Optional[Vocabulary] = None) -> None:
    """Raise RequestValidationError listing every reason the request cannot run."""
    problems = []
    if not tokenise_keywords(request.keyword, vocabulary):
        problems.append("keyword must contain at least one usable word")
    if request.target_count <= 0:
        problems.append("target_count must be positive")
    if request.max_length < 3:
        problems.append("max_length must be at least 3")
    if problems:
        raise RequestValidationError(problems)


class AutoFindOrchestrator:
    """Runs the adaptive search for available, brandable domain names."""

    def __init__(self,
                 resolver=None,
                 settings: Optional[AutoFindSettings] = None,
                 generator: Optional[Generator] = None,
                 clock: Callable[[], float] = time.monotonic,
                 vocabulary: Optional[Vocabulary] = None):
        """
        Args:
            resolver: Object exposing ``check_availability_batch(domains, abort=None)``
            settings: Engine settings (defaults when omitted)
            generator: Candidate generator, ``generate_candidates`` by default
            clock: Monotonic clock in seconds, used for the wall-clock cap
            vocabulary: Vocabulary tables (loaded from the settings path by default)
        """
        self.settings = settings or AutoFindSettings()
        self.vocabulary = vocabulary or load_vocabulary(self.settings.vocabulary_path)
        self.resolver = resolver or AvailabilityResolver.from_config(self.settings.resolver)
        self.generator = generator or generate_candidates
        self.clock = clock
        self.state = RunState.DONE

    def _transition(self, state: RunState, attempt: int = 0):
        self.state = state
        logger.debug(f"AutoFind attempt {attempt}: {state.value}")

    async def run_payload(self,
                          data: Dict[str, Any],
                          abort: Optional[asyncio.Event] = None) -> AutoFindResult:
        """Parse a raw request payload and run it; unparseable payloads are rejected."""
        try:
            request = AutoFindRequest.from_dict(data)
        except RequestValidationError as e:
            return self._rejected(e, 0)
        return await self.run(request, abort)

    def _rejected(self, error: RequestValidationError, target: int) -> AutoFindResult:
        logger.info(f"Rejected AutoFind request: {error}")
        return AutoFindResult(picks=[], summary=AutoFindRunSummary(
            target=target,
            max_attempts=self.settings.search.max_attempts,
            terminated_by=Termination.INVALID_REQUEST,
            validation_errors=error.problems,
            explanation="Request could not be searched: " + "; ".join(error.problems) + ".",
        ))

    async def run(self,
                  request: AutoFindRequest,
                  abort: Optional[asyncio.Event] = None) -> AutoFindResult:
        """
        Search until ``target_count`` available names are found or the run
        terminates (attempts exhausted, time cap, abort).

        Args:
            request: AutoFind request
            abort: Optional event; once set the run stops between steps

        Returns:
            Picks in acceptance order plus run diagnostics
        """
        search = self.settings.search
        started = self.clock()

        try:
            validate_request(request, self.vocabulary)
        except RequestValidationError as e:
            return self._rejected(e, max(0, request.target_count))

        controls = request.controls
        target = min(request.target_count, search.max_target)
        unrestricted = controls.show_any_available
        quality_threshold = 0.0 if unrestricted else search.quality_threshold
        meaning_floor = search.meaning_floor if controls.meaning_first and not unrestricted else 0.0
        blocklist = normalise_terms(controls.blocklist)
        allowlist = normalise_terms(controls.allowlist)
        tld = search.target_tld

        logger.info(
            f"AutoFind started: keyword='{request.keyword}' industry={request.industry} "
            f"vibe={request.vibe} target={target} max_length={request.max_length}"
        )

        params = SearchParameters(
            max_length=min(request.max_length, search.max_length_cap),
            controls=controls,
        )
        ladder = RelaxationLadder(max_length_cap=search.max_length_cap)

        picks: Dict[str, ScoredCandidate] = {}
        checked: Dict[str, bool] = {}
        unavailable: Dict[str, ScoredCandidate] = {}
        rejected: List[str] = []
        totals = {'generated': 0, 'passed': 0, 'checked': 0, 'available': 0, 'errors': 0}
        attempts = 0
        terminated_by = Termination.ATTEMPTS_EXHAUSTED

        while attempts < search.max_attempts:
            if abort is not None and abort.is_set():
                terminated_by = Termination.ABORTED
                break
            if attempts > 0 and self.clock() - started >= search.time_cap_seconds:
                terminated_by = Termination.TIME_CAP
                break

            attempts += 1
            ranked = self._prepare_attempt(request, params, attempts, blocklist, allowlist, rejected, totals)
            shortlist = [
                candidate for candidate in ranked
                if candidate.score >= quality_threshold
                and candidate.meaning_score >= meaning_floor
                and f"{candidate.name}.{tld}" not in checked
                and candidate.name not in picks
            ][:search.shortlist_size]

            if shortlist:
                self._transition(RunState.CHECKING, attempts)
                await self._check_shortlist(shortlist, tld, target, picks, checked, unavailable, totals, abort)

            if len(picks) >= target:
                self._transition(RunState.ACCEPTING, attempts)
                terminated_by = Termination.TARGET_MET
                break
            if abort is not None and abort.is_set():
                terminated_by = Termination.ABORTED
                break

            if attempts < search.max_attempts:
                self._transition(RunState.RELAXING, attempts)
                relaxed = ladder.relax(params)
                if relaxed is not None:
                    params = relaxed
                    logger.debug(f"Relaxed search: {ladder.applied_labels[-1]}")

        near_misses: List[NearMissOption] = []
        if len(picks) < target and unavailable and terminated_by != Termination.ABORTED:
            near_misses = await self._near_misses(list(unavailable.values()), abort)

        self._transition(RunState.DONE, attempts)
        summary = self._summarise(
            request, target, attempts, totals, picks, rejected, ladder, near_misses,
            quality_threshold, meaning_floor, terminated_by, started,
        )
        logger.info(
            f"AutoFind finished: found {summary.found}/{target} in {attempts} attempts "
            f"({terminated_by.value}, {summary.elapsed_ms:.0f}ms)"
        )
        return AutoFindResult(picks=list(picks.values()), summary=summary)

    def _prepare_attempt(self,
                         request: AutoFindRequest,
                         params: SearchParameters,
                         attempt: int,
                         blocklist: List[str],
                         allowlist: List[str],
                         rejected: List[str],
                         totals: Dict[str, int]) -> List[ScoredCandidate]:
        """Generate, filter and rank one attempt's pool."""
        search = self.settings.search

        self._transition(RunState.GENERATING, attempt)
        concepts = build_concepts(
            request.keyword,
            request.industry,
            request.vibe,
            limit=16 if params.expanded_concepts else 8,
            expanded=params.expanded_concepts,
            vocabulary=self.vocabulary,
        )
        generated = self.generator(
            GenerationInput(
                keyword=request.keyword,
                industry=request.industry,
                vibe=request.vibe,
                max_length=params.max_length,
                controls=params.controls,
            ),
            pool_size=search.pool_size,
            options=GenerationOptions(
                seed_salt=f"attempt-{attempt}",
                mixed_styles=params.mixed_styles,
                allow_generic_affix=params.allow_generic_affix,
                concept_fragments=[concept.fragment for concept in concepts],
            ),
            vocabulary=self.vocabulary,
        )
        totals['generated'] += len(generated.candidates)

        self._transition(RunState.FILTERING, attempt)
        passed: List[Candidate] = []
        for candidate in generated.candidates:
            decision = evaluate_candidate(
                candidate.name, params.max_length, params.controls,
                blocklist, allowlist, self.vocabulary,
            )
            if decision.accepted:
                passed.append(candidate)
            else:
                rejected.extend(decision.reasons)
        totals['passed'] += len(passed)

        self._transition(RunState.SCORING, attempt)
        return rank_candidates(
            passed,
            request.industry,
            request.vibe,
            generated.keyword_tokens,
            params.controls,
            concepts,
            tld=search.target_tld,
            vocabulary=self.vocabulary,
        )

    async def _check_shortlist(self,
                               shortlist: List[ScoredCandidate],
                               tld: str,
                               target: int,
                               picks: Dict[str, ScoredCandidate],
                               checked: Dict[str, bool],
                               unavailable: Dict[str, ScoredCandidate],
                               totals: Dict[str, int],
                               abort: Optional[asyncio.Event]):
        by_domain = {f"{candidate.name}.{tld}": candidate for candidate in shortlist}
        results = await self.resolver.check_availability_batch(list(by_domain), abort=abort)
        verdicts = {result.domain.lower(): result for result in results}

        for domain, candidate in by_domain.items():
            result = verdicts.get(domain)
            if result is None or result.error == ABORTED:
                continue

            checked[domain] = result.available
            totals['checked'] += 1
            if result.error:
                totals['errors'] += 1
            if result.available:
                totals['available'] += 1
                if len(picks) < target and candidate.name not in picks:
                    picks[candidate.name] = replace(candidate, domain=domain)
            elif not result.error:
                unavailable.setdefault(candidate.name, candidate)

    async def _near_misses(self,
                           candidates: List[ScoredCandidate],
                           abort: Optional[asyncio.Event]) -> List[NearMissOption]:
        """Names taken on the target TLD that are free on an alternate one."""
        search = self.settings.search
        shortlist = sorted(candidates, key=lambda c: (-c.score, c.name))[:search.near_miss_probe]
        if not shortlist or not search.alternate_tlds:
            return []

        domains = [f"{c.name}.{alt}" for c in shortlist for alt in search.alternate_tlds]
        results = await self.resolver.check_availability_batch(domains, abort=abort)
        free = {result.domain.lower() for result in results if result.available and not result.error}

        near_misses = []
        for candidate in shortlist:
            tlds = [alt for alt in search.alternate_tlds if f"{candidate.name}.{alt}" in free]
            if tlds:
                near_misses.append(NearMissOption(name=candidate.name, available_tlds=tlds))
            if len(near_misses) >= search.near_miss_limit:
                break
        return near_misses

    def _summarise(self,
                   request: AutoFindRequest,
                   target: int,
                   attempts: int,
                   totals: Dict[str, int],
                   picks: Dict[str, ScoredCandidate],
                   rejected: List[str],
                   ladder: RelaxationLadder,
                   near_misses: List[NearMissOption],
                   quality_threshold: float,
                   meaning_floor: float,
                   terminated_by: Termination,
                   started: float) -> AutoFindRunSummary:
        found = len(picks)
        checked = totals['checked']
        hit_rate = round(totals['available'] / checked * 100, 2) if checked else 0.0

        return AutoFindRunSummary(
            found=found,
            target=target,
            attempts=attempts,
            max_attempts=self.settings.search.max_attempts,
            generated_candidates=totals['generated'],
            passed_filters=totals['passed'],
            checked_availability=checked,
            provider_errors=totals['errors'],
            availability_hit_rate=hit_rate,
            quality_threshold=quality_threshold,
            meaning_floor=meaning_floor,
            relaxations_applied=ladder.applied_labels,
            top_rejected_reasons=top_rejected_reasons(rejected, 6),
            checking_progress=(
                f"Checking {checked}/{max(totals['generated'], checked)}... Found {found}/{target}"
            ),
            suggestions=self._suggestions(request, found, target, totals['errors']),
            near_misses=near_misses,
            explanation=self._explanation(found, target, checked, totals['errors'], terminated_by),
            elapsed_ms=round((self.clock() - started) * 1000, 2),
            terminated_by=terminated_by,
        )

    @staticmethod
    def _suggestions(request: AutoFindRequest, found: int, target: int, errors: int) -> List[str]:
        if found >= target:
            return []

        controls = request.controls
        suggestions = ["increase_length"]
        if not controls.prefer_two_word_brands:
            suggestions.append("two_word_mode")
        if not controls.allow_vibe_suffix:
            suggestions.append("allow_suffix")
        suggestions.append("switch_tld_io_ai")
        if not controls.show_any_available:
            suggestions.append("show_any_available")
        if errors > 0:
            suggestions.append("retry")
        return suggestions[:6]

    def _explanation(self,
                     found: int,
                     target: int,
                     checked: int,
                     errors: int,
                     terminated_by: Termination) -> str:
        tld = self.settings.search.target_tld
        if found >= target:
            return f"Found {found}/{target} available .{tld} names with meaning-first quality filters."

        parts = [f"Found {found}/{target} available .{tld} names after checking {checked} unique domains."]
        if terminated_by == Termination.TIME_CAP:
            parts.append("The search stopped at its time limit.")
        elif terminated_by == Termination.ABORTED:
            parts.append("The search was cancelled.")
        else:
            parts.append(f".{tld} scarcity at this length is common. Try +2 chars, 2-word mode, or allow suffix.")
        if errors > 0:
            parts.append("Some provider responses were degraded.")
        return " ".join(parts)
