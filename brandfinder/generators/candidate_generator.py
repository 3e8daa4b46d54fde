"""Deterministic candidate pool generation."""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..lexicon import Lexicon, load_lexicon, unique
from ..models import Candidate, SearchRequest
from .rng import SeededRandom
from . import wordplay

logger = logging.getLogger(__name__)

MIN_POOL_SIZE = 240
MAX_POOL_SIZE = 1800
DEFAULT_POOL_SIZE = 700
MIN_TARGET_LENGTH = 5
MAX_TARGET_LENGTH = 24
ATTEMPTS_PER_SLOT = 12

CONNECTOR_VOWELS = ('a', 'e', 'i', 'o', 'u')


@dataclass(frozen=True)
class GenerationOptions:
    """Per-call overrides layered over the request's controls."""
    pool_size: int = DEFAULT_POOL_SIZE
    max_length: Optional[int] = None
    min_length: int = 4
    keyword_position: Optional[str] = None
    keyword_mode: Optional[str] = None
    style: Optional[str] = None
    two_word: Optional[bool] = None
    allow_suffix: Optional[bool] = None
    allow_generic_affix: bool = False
    concept_fragments: Tuple[str, ...] = ()
    seed_salt: str = "base"


@dataclass
class GenerationResult:
    candidates: List[Candidate]
    keyword_tokens: Tuple[str, ...]
    related_terms: Tuple[str, ...]
    attempts: int = 0
    seed: str = ""


@dataclass
class _Ingredients:
    keyword_tokens: Tuple[str, ...]
    related_terms: Tuple[str, ...]
    primary_roots: Tuple[str, ...]
    base_roots: Tuple[str, ...]
    verbs: Tuple[str, ...]
    modifiers: Tuple[str, ...]
    prefixes: Tuple[str, ...]
    suffixes: Tuple[str, ...]
    nouns: Tuple[str, ...]
    concepts: Tuple[str, ...] = field(default_factory=tuple)


def strategy_weights(prefer_two_word: bool) -> List[Tuple[str, float]]:
    return [
        ('two_word_compound', 2.6 if prefer_two_word else 1.2),
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


class CandidateGenerator:
    """Builds a pool of unique, readable names from request context.

    The same request, options and seed always produce the same pool in the
    same order.
    """

    def __init__(self, lexicon: Optional[Lexicon] = None):
        self.lexicon = lexicon or load_lexicon()

    @staticmethod
    def seed_string(request: SearchRequest, style: str, target_length: int, salt: str) -> str:
        base = request.controls.seed or (
            f"{request.keyword}:{request.industry or 'other'}:{request.vibe or 'default'}"
        )
        return f"{base}:{style}:{target_length}:{salt or 'base'}"

    def _ingredients(self, request: SearchRequest, style: str, target_length: int,
                     concepts: Tuple[str, ...]) -> _Ingredients:
        lex = self.lexicon
        keyword_tokens = lex.parse_keyword_tokens(request.keyword)
        related = lex.expand_related_terms(keyword_tokens, request.industry)
        industry = lex.industry_lexicon(request.industry)
        flavor = lex.vibe_flavor(request.vibe)

        base_roots = unique([*concepts, *keyword_tokens, *related, *industry.roots, *lex.flair_morphemes])[:100]
        short_roots = tuple(r for r in base_roots if len(r) <= max(4, target_length - 2))
        return _Ingredients(
            keyword_tokens=keyword_tokens,
            related_terms=related,
            primary_roots=short_roots if len(short_roots) >= 10 else base_roots,
            base_roots=base_roots,
            verbs=industry.verbs,
            modifiers=unique([*lex.weighted_modifiers(request.vibe, request.industry), *flavor.modifiers]),
            prefixes=unique([*industry.prefixes, *flavor.prefixes]),
            suffixes=unique([*industry.suffixes, *flavor.suffixes, *lex.style_suffix_words(style)]),
            nouns=unique([*flavor.nouns, *lex.flair_morphemes, *related[:12], *concepts]),
            concepts=concepts,
        )

    def _compose(self, strategy: str, rng: SeededRandom, parts: Dict[str, str],
                 blend_style: bool) -> Tuple[str, List[str]]:
        root_a, root_b = parts['root_a'], parts['root_b']
        verb, modifier = parts['verb'], parts['modifier']
        prefix, suffix, noun = parts['prefix'], parts['suffix'], parts['noun']
        join = wordplay.blend if blend_style else wordplay.merge_readable

        if strategy == 'two_word_compound':
            return wordplay.merge_readable(root_a, root_b), [root_a, root_b]
        if strategy == 'semantic_compound':
            return join(root_a, root_b), [root_a, root_b]
        if strategy == 'wordplay_blend':
            return wordplay.wordplay_blend(root_a, root_b), [root_a, root_b]
        if strategy == 'emotive_modifier':
            return wordplay.merge_readable(modifier, root_a), [modifier, root_a]
        if strategy == 'action_noun':
            return wordplay.merge_readable(verb, root_a), [verb, root_a]
        if strategy == 'root_suffix':
            return join(root_a, suffix), [root_a, suffix]
        if strategy == 'prefix_root':
            return join(prefix, root_a), [prefix, root_a]
        if strategy == 'vibe_compound':
            return wordplay.merge_readable(noun, root_a), [noun, root_a]
        if strategy == 'portmanteau':
            return wordplay.blend(root_a, root_b), [root_a, root_b]
        if strategy == 'soft_connector_blend':
            connector = rng.choice(CONNECTOR_VOWELS)
            return wordplay.soft_connector(root_a, root_b, connector), [root_a, root_b]
        if strategy == 'real_word_twist':
            return wordplay.real_word_twist(root_a), [root_a]
        if strategy == 'vowel_swap':
            return wordplay.swap_vowel(join(root_a, root_b)), [root_a, root_b]
        if strategy == 'letter_omission':
            source = wordplay.blend(root_a, root_b) if blend_style else wordplay.merge_readable(verb, root_a)
            return wordplay.omit_letter(source), [verb, root_a, root_b]
        # mood_pairing
        return wordplay.merge_readable(modifier, noun), [modifier, noun]

    def generate(self, request: SearchRequest, options: Optional[GenerationOptions] = None,
                 rng: Optional[SeededRandom] = None) -> GenerationResult:
        """Generate a de-duplicated candidate pool in discovery order."""
        options = options or GenerationOptions()
        controls = request.controls
        lex = self.lexicon

        style = options.style or controls.style
        position = options.keyword_position or controls.keyword_position
        keyword_mode = options.keyword_mode or controls.must_include_keyword
        two_word = controls.prefer_two_word_brands if options.two_word is None else options.two_word
        allow_suffix = controls.allow_vibe_suffix if options.allow_suffix is None else options.allow_suffix
        target_length = max(MIN_TARGET_LENGTH,
                            min(options.max_length or request.max_length or 10, MAX_TARGET_LENGTH))
        min_length = max(3, min(options.min_length, target_length))
        pool_size = max(MIN_POOL_SIZE, min(MAX_POOL_SIZE, options.pool_size or DEFAULT_POOL_SIZE))
        concepts = unique(options.concept_fragments)

        seed = self.seed_string(request, style, target_length, options.seed_salt)
        rng = rng or SeededRandom(seed)
        parts = self._ingredients(request, style, target_length, concepts)
        weights = strategy_weights(two_word)
        strategies = [name for name, _ in weights]
        strategy_w = [w for _, w in weights]
        blend_style = style == 'brandable_blends'

        pool: Dict[str, Candidate] = {}

        def add(name: str, strategy: str, roots: List[str]):
            name = wordplay.compact(wordplay.clean_name(name), target_length, lex.filler_words)
            if len(name) < min_length or name in pool or wordplay.has_ugly_collision(name):
                return
            pool[name] = Candidate(
                name=name,
                strategy=strategy,
                roots=tuple(roots),
                keyword_hits=tuple(t for t in parts.keyword_tokens if t in name),
            )

        attempts = 0
        while len(pool) < pool_size and attempts < pool_size * ATTEMPTS_PER_SLOT:
            attempts += 1

            keyword_root = rng.choice(parts.keyword_tokens) if parts.keyword_tokens else ''
            draw = {
                'root_a': rng.choice(parts.primary_roots),
                'root_b': rng.choice(parts.base_roots),
                'verb': rng.choice(parts.verbs),
                'modifier': rng.choice(parts.modifiers),
                'prefix': rng.choice(parts.prefixes),
                'suffix': rng.choice(parts.suffixes),
                'noun': rng.choice(parts.nouns),
            }
            strategy = rng.weighted_choice(strategies, strategy_w)
            built, roots = self._compose(strategy, rng, draw, blend_style)
            if not built:
                continue

            if allow_suffix and rng.random() > 0.78:
                built = wordplay.merge_readable(built, rng.choice(lex.tasteful_suffixes))

            if keyword_root and keyword_mode == 'exact':
                built = wordplay.place_keyword(built, keyword_root, position, rng.random())
                roots = [keyword_root, *roots]
            elif keyword_root and keyword_mode == 'partial' and rng.random() > 0.35:
                partial = keyword_root[:-1] if len(keyword_root) > 4 else keyword_root
                built = wordplay.place_keyword(built, partial, position, rng.random())
                roots = [partial, *roots]

            add(built, strategy, roots)

            if options.allow_generic_affix and len(pool) < pool_size and rng.random() > 0.82:
                affix = rng.choice(lex.tasteful_suffixes)
                add(wordplay.merge_readable(draw['root_a'], affix), 'generic_affix_relaxation',
                    [draw['root_a'], affix])

        logger.debug("Generated %d candidates in %d attempts (seed=%s)", len(pool), attempts, seed)
        return GenerationResult(
            candidates=list(pool.values()),
            keyword_tokens=parts.keyword_tokens,
            related_terms=parts.related_terms,
            attempts=attempts,
            seed=seed,
        )
