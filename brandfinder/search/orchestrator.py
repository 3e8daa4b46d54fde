"""Relaxation-ladder search: generate, filter, rank, check, relax, repeat."""

import asyncio
import contextlib
import logging
import math
import secrets
import time
from dataclasses import dataclass, field, replace
from typing import Awaitable, Callable, Dict, List, Optional, Set, TypeVar

from ..checkers.availability_service import AvailabilityOracle, DomainResult
from ..config import Settings
from ..exceptions import SearchCancelled
from ..generators.candidate_generator import CandidateGenerator, GenerationOptions
from ..lexicon import Lexicon, load_lexicon
from ..models import (
    Candidate,
    RelaxationStep,
    RunResult,
    RunSummary,
    ScoredCandidate,
    SearchRequest,
)
from ..scoring.meaning import MeaningEngine, dedupe_by_meaning_diversity
from ..scoring.scorer import BrandabilityStrategy, BrandScorer, ScoringContext, ScoringStrategy
from ..utils.word_validator import WordValidator, top_rejected_reasons
from . import summary as run_summary
from .relaxation import LADDER, Stage, iter_stages

logger = logging.getLogger(__name__)

T = TypeVar('T')
ProgressCallback = Callable[[str, int, int, int], None]

MIN_ADAPTIVE_POOL = 340
MAX_ADAPTIVE_POOL = 1600
MAX_STAGE_POOL = 1700
STAGE_POOL_STEP = 90
EMPTY_STAGE_POOL_BOOST = 170
LOW_HIT_RATE_POOL_BOOST = 180
LOW_HIT_RATE = 0.013
BASE_CONCEPT_LIMIT = 7
MAX_CONCEPT_LIMIT = 14
MAX_TARGET_COUNT = 10


def quality_floor(ranked: List[ScoredCandidate], stage: int, percentile: float, minimum: float,
                  margin: float, stage_step: float, show_any: bool = False) -> float:
    """Score a candidate must reach to be worth a lookup at this stage.

    Taken at ``percentile`` of the descending ranking, then loosened by a
    margin that grows every stage; never below ``minimum``.
    """
    if show_any or not ranked:
        return -math.inf
    index = min(len(ranked) - 1, max(0, int(len(ranked) * percentile)))
    floor = max(minimum, ranked[index].score - (margin + stage * stage_step))
    return round(floor, 2)


def meaning_floor(stage: int, meaning_first: bool, show_any: bool = False) -> float:
    if not meaning_first or show_any:
        return 0.0
    return float(max(58, 70 - 4 * stage))


@dataclass
class _RunState:
    """Accumulator shared by every stage of one run."""
    target: int
    started_at: float
    picked: Dict[str, ScoredCandidate] = field(default_factory=dict)
    checked: Set[str] = field(default_factory=set)
    unavailable: Dict[str, ScoredCandidate] = field(default_factory=dict)
    rejected: List[str] = field(default_factory=list)
    steps: List[RelaxationStep] = field(default_factory=list)
    generated: int = 0
    passed_filters: int = 0
    lookups: int = 0
    provider_errors: int = 0
    attempts: int = 0
    quality_threshold: float = 0.0
    meaning_threshold: float = 0.0

    @property
    def done(self) -> bool:
        return len(self.picked) >= self.target


class SearchOrchestrator:
    """Runs one search request against an availability oracle.

    Nothing is shared between runs except the oracle itself; every piece of
    run state lives in a fresh ``_RunState``.
    """

    def __init__(
        self,
        oracle: AvailabilityOracle,
        settings: Optional[Settings] = None,
        lexicon: Optional[Lexicon] = None,
        strategy: Optional[ScoringStrategy] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.oracle = oracle
        self.settings = settings or Settings()
        self.lexicon = lexicon or load_lexicon()
        self.generator = CandidateGenerator(self.lexicon)
        self.meaning = MeaningEngine(self.lexicon)
        self.strategy = strategy or BrandabilityStrategy(self.lexicon, self.settings.scoring)
        self.clock = clock

    # -- guards -----------------------------------------------------------

    @staticmethod
    def _ensure_not_cancelled(cancel_event: Optional[asyncio.Event], state: _RunState):
        if cancel_event is not None and cancel_event.is_set():
            raise SearchCancelled(checked=state.lookups)

    def _out_of_time(self, state: _RunState) -> bool:
        return self.clock() - state.started_at >= self.settings.search.time_budget_seconds

    def _lookups_left(self, state: _RunState) -> int:
        return max(0, self.settings.search.max_total_lookups - state.lookups)

    async def _race(self, work: Awaitable[T], cancel_event: Optional[asyncio.Event],
                    state: _RunState) -> T:
        """Await ``work`` unless the cancel event fires first."""
        if cancel_event is None:
            return await work

        task = asyncio.ensure_future(work)
        waiter = asyncio.ensure_future(cancel_event.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()

        if not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
            raise SearchCancelled(checked=state.lookups)
        return task.result()

    async def _lookup(self, domains: List[str], cancel_event: Optional[asyncio.Event],
                      state: _RunState) -> List[DomainResult]:
        availability = self.settings.availability
        state.checked.update(domains)
        try:
            results = await self._race(
                self.oracle.check_availability(
                    domains,
                    concurrency=availability.concurrency,
                    max_retries=availability.max_retries,
                    backoff_ms=availability.backoff_ms,
                    ttl_seconds=availability.ttl_seconds,
                ),
                cancel_event,
                state,
            )
        except (SearchCancelled, asyncio.CancelledError):
            raise
        except Exception as e:
            logger.warning("Availability provider failed for a batch of %d: %s", len(domains), e)
            error = str(e) or e.__class__.__name__
            results = [DomainResult(domain=d, available=None, method='error', error=error)
                       for d in domains]
        state.lookups += len(domains)
        errors = sum(1 for r in results if r.error)
        if errors:
            logger.warning("%d of %d lookups came back with provider errors", errors, len(results))
        state.provider_errors += errors
        return results

    # -- stage pieces -----------------------------------------------------

    def _generate(self, request: SearchRequest, stage: Stage, concepts, pool_size: int,
                  run_salt: str) -> List[Candidate]:
        settings = stage.settings
        options = GenerationOptions(
            pool_size=pool_size,
            max_length=settings.max_length,
            min_length=min(self.settings.search.min_length, settings.max_length),
            keyword_position=settings.keyword_position,
            keyword_mode=settings.keyword_mode,
            style=request.controls.style,
            two_word=settings.two_word,
            allow_suffix=settings.allow_suffix,
            allow_generic_affix=settings.allow_generic_affix,
            concept_fragments=tuple(entry.fragment for entry in concepts),
            seed_salt=f"{run_salt}:{stage.rung.id}:{stage.index}",
        )
        return self.generator.generate(request, options).candidates

    def _filter(self, candidates: List[Candidate], request: SearchRequest, stage: Stage,
                state: _RunState) -> List[Candidate]:
        max_length = stage.settings.max_length
        validator = WordValidator(min_length=min(self.settings.search.min_length, max_length),
                                  max_length=max_length, lexicon=self.lexicon)
        accepted = []
        for candidate in candidates:
            decision = validator.evaluate(candidate.name, request.controls)
            if decision.accepted:
                accepted.append(candidate)
            else:
                state.rejected.extend(decision.reasons)
        return accepted

    def _shortlist(self, candidates: List[Candidate], request: SearchRequest, stage: Stage,
                   concepts, state: _RunState) -> List[ScoredCandidate]:
        controls = request.controls
        scoring = self.settings.scoring
        context = ScoringContext(
            keyword_tokens=self.lexicon.parse_keyword_tokens(request.keyword),
            controls=controls,
            industry=request.industry,
            vibe=request.vibe,
            concepts=tuple(concepts),
            keyword_position=stage.settings.keyword_position,
        )
        scorer = BrandScorer(context, self.strategy, self.lexicon)
        ranked = scorer.rank(candidates, keyword_mode=stage.settings.keyword_mode)

        floor = quality_floor(ranked, stage.index, scoring.floor_percentile, scoring.floor_minimum,
                              scoring.floor_margin, scoring.floor_stage_step, controls.show_any_available)
        min_meaning = meaning_floor(stage.index, controls.meaning_first, controls.show_any_available)
        if math.isfinite(floor):
            state.quality_threshold = max(state.quality_threshold, floor)
        state.meaning_threshold = max(state.meaning_threshold, min_meaning)

        kept = [c for c in ranked if c.score >= floor and c.meaning_score >= min_meaning]
        logger.debug("Stage %s: %d ranked, floor %.2f, %d above floor",
                     stage.rung.id, len(ranked), floor, len(kept))
        return dedupe_by_meaning_diversity(kept)[:self.settings.search.shortlist_size]

    async def _check_stage(self, shortlist: List[ScoredCandidate], stage: Stage,
                           cancel_event: Optional[asyncio.Event], state: _RunState,
                           on_progress: Optional[ProgressCallback]):
        tld = self.settings.search.primary_tld
        by_domain = {f"{c.name}.{tld}": c for c in shortlist}
        queue = [domain for domain in by_domain if domain not in state.checked]
        batch_size = self.settings.search.batch_size

        cursor = 0
        while cursor < len(queue) and not state.done:
            self._ensure_not_cancelled(cancel_event, state)
            budget = self._lookups_left(state)
            if budget <= 0 or self._out_of_time(state):
                break

            batch = queue[cursor:cursor + min(batch_size, budget)]
            cursor += len(batch)
            results = await self._lookup(batch, cancel_event, state)
            self._ensure_not_cancelled(cancel_event, state)

            for result in results:
                scored = by_domain.get(result.domain)
                if scored is None:
                    continue
                if result.is_available:
                    if len(state.picked) < state.target:
                        state.picked.setdefault(result.domain, scored)
                elif result.available is False:
                    state.unavailable.setdefault(scored.name, scored)

            logger.debug("Stage %s batch: %d checked, %d picked", stage.rung.id, len(batch), len(state.picked))
            if on_progress is not None:
                on_progress(stage.rung.label, len(state.picked), state.target, state.lookups)

    async def _near_misses(self, cancel_event: Optional[asyncio.Event], state: _RunState):
        search = self.settings.search
        if state.done or not search.alternate_tlds or search.near_miss_shortlist <= 0:
            return []
        if self._out_of_time(state):
            return []

        shortlist = BrandScorer.sort_ranked(state.unavailable.values())[:search.near_miss_shortlist]
        domains = [
            f"{candidate.name}.{tld}"
            for candidate in shortlist
            for tld in search.alternate_tlds
            if f"{candidate.name}.{tld}" not in state.checked
        ][:self._lookups_left(state)]
        if not domains:
            return []

        self._ensure_not_cancelled(cancel_event, state)
        results = await self._lookup(domains, cancel_event, state)
        self._ensure_not_cancelled(cancel_event, state)
        return run_summary.collect_near_misses(shortlist, results, search.alternate_tlds,
                                               search.max_near_misses)

    # -- run --------------------------------------------------------------

    async def run(self, request: SearchRequest, *, cancel_event: Optional[asyncio.Event] = None,
                  on_progress: Optional[ProgressCallback] = None) -> RunResult:
        """Search until the target is met or a budget runs out.

        Raises ``SearchCancelled`` if ``cancel_event`` is set before the run
        completes; a cancelled run never returns partial picks.
        """
        search = self.settings.search
        target = max(1, min(request.target_count or search.target_count, MAX_TARGET_COUNT))
        request = replace(request, target_count=target)
        state = _RunState(target=target, started_at=self.clock())
        run_salt = 'seeded' if request.controls.seed else secrets.token_hex(4)
        adaptive_pool = max(MIN_ADAPTIVE_POOL, min(search.pool_size, MAX_ADAPTIVE_POOL))
        max_attempts = max(1, min(search.max_attempts, len(LADDER)))

        for stage in iter_stages(request, max_attempts):
            self._ensure_not_cancelled(cancel_event, state)
            if state.attempts > 0 and self._out_of_time(state):
                logger.info("Time budget of %ss spent after %d stages",
                            search.time_budget_seconds, state.attempts)
                break

            state.attempts += 1
            state.steps.append(stage.step)

            concepts = self.meaning.select_concepts(
                request.keyword, request.industry, request.vibe,
                limit=min(MAX_CONCEPT_LIMIT, BASE_CONCEPT_LIMIT + stage.index),
                expanded=stage.index > 0,
            )
            pool_size = min(MAX_STAGE_POOL, adaptive_pool + stage.index * STAGE_POOL_STEP)
            generated = self._generate(request, stage, concepts, pool_size, run_salt)
            state.generated += len(generated)

            survivors = self._filter(generated, request, stage, state)
            state.passed_filters += len(survivors)

            shortlist = self._shortlist(survivors, request, stage, concepts, state)
            if not shortlist:
                adaptive_pool = min(MAX_STAGE_POOL, adaptive_pool + EMPTY_STAGE_POOL_BOOST)
                logger.debug("Stage %s produced nothing usable; pool widened to %d",
                             stage.rung.id, adaptive_pool)
                continue

            await self._check_stage(shortlist, stage, cancel_event, state, on_progress)

            if state.done or self._lookups_left(state) <= 0:
                break
            if state.lookups and len(state.picked) / state.lookups < LOW_HIT_RATE:
                adaptive_pool = min(MAX_STAGE_POOL, adaptive_pool + LOW_HIT_RATE_POOL_BOOST)

        picks = BrandScorer.sort_ranked(state.picked.values())[:target]
        near_misses = await self._near_misses(cancel_event, state)
        self._ensure_not_cancelled(cancel_event, state)

        found = len(picks)
        result = RunResult(
            picks=picks,
            summary=RunSummary(
                found=found,
                target=target,
                attempts=state.attempts,
                max_attempts=max_attempts,
                generated_candidates=state.generated,
                passed_filters=state.passed_filters,
                checked_availability=state.lookups,
                provider_errors=state.provider_errors,
                availability_hit_rate=round(found / state.lookups * 100, 2) if state.lookups else 0.0,
                quality_threshold=round(max(state.quality_threshold, state.meaning_threshold), 2),
                relaxations_applied=[step.label for step in state.steps if step.applied],
                relaxation_steps=list(state.steps),
                top_rejected_reasons=top_rejected_reasons(state.rejected),
                checking_progress=run_summary.checking_progress(state.lookups, state.generated, found, target),
                suggestions=run_summary.build_suggestions(request.controls, state.steps, found, target,
                                                          state.provider_errors),
                near_misses=near_misses,
                explanation=run_summary.build_explanation(found, target, len(state.checked),
                                                          state.provider_errors, search.primary_tld),
                duration_seconds=round(self.clock() - state.started_at, 3),
            ),
        )
        logger.info("Search finished: %d/%d picks, %d lookups", found, target, state.lookups)
        return result
