"""Static lexicon and morpheme store.

Word lists and the fragment -> meaning dictionary are shipped as YAML under
``brandfinder/data`` and loaded once per process. Everything handed out from
here is immutable (tuples, frozen dataclasses, read-only mappings).
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

import yaml

DATA_DIR = Path(__file__).resolve().parent / "data"
LEXICON_PATH = DATA_DIR / "lexicon.yaml"
MORPHEMES_PATH = DATA_DIR / "morphemes.yaml"

DEFAULT_INDUSTRY = "Other"

_NON_ALPHA = re.compile(r"[^a-z]")
_NON_ALNUM = re.compile(r"[^a-z0-9]")
_TOKEN_SPLIT = re.compile(r"[\s,]+")


def normalise_token(value) -> str:
    """Lowercase and strip everything but ``a-z``."""
    return _NON_ALPHA.sub("", str(value).lower())


def normalise_fragment(value) -> str:
    return _NON_ALNUM.sub("", str(value).lower())


def unique(words: Iterable[str]) -> Tuple[str, ...]:
    """Normalise and de-duplicate while keeping first-seen order."""
    seen = {}
    for word in words:
        token = normalise_token(word)
        if token and token not in seen:
            seen[token] = None
    return tuple(seen)


@dataclass(frozen=True)
class MorphemeEntry:
    """A sub-word fragment with a human-readable meaning."""
    fragment: str
    meaning: str
    category: str
    weight: float

    @property
    def short_meaning(self) -> str:
        return self.meaning.split(";")[0].strip()


@dataclass(frozen=True)
class IndustryLexicon:
    """Word lists for one industry, merged with the shared generic terms."""
    name: str
    roots: Tuple[str, ...]
    verbs: Tuple[str, ...]
    modifiers: Tuple[str, ...]
    prefixes: Tuple[str, ...]
    suffixes: Tuple[str, ...]
    off_topic_roots: Tuple[str, ...]


@dataclass(frozen=True)
class VibeFlavor:
    """Letter palette and vocabulary for a stylistic vibe."""
    name: str
    modifiers: Tuple[str, ...]
    prefixes: Tuple[str, ...]
    suffixes: Tuple[str, ...]
    nouns: Tuple[str, ...]
    terms: Tuple[str, ...]
    hints: Tuple[str, ...]


class Lexicon:
    """Read-only view over the loaded word lists and morpheme store."""

    def __init__(self, raw: dict, morphemes: List[dict]):
        generic = raw.get("generic_terms") or {}
        self._generic = {key: unique(generic.get(key) or []) for key in
                         ("roots", "verbs", "modifiers", "prefixes", "suffixes")}

        industries: Dict[str, IndustryLexicon] = {}
        for name, entry in (raw.get("industries") or {}).items():
            industries[name] = IndustryLexicon(
                name=name,
                roots=unique([*(entry.get("roots") or []), *self._generic["roots"]]),
                verbs=unique([*(entry.get("verbs") or []), *self._generic["verbs"]]),
                modifiers=unique([*(entry.get("modifiers") or []), *self._generic["modifiers"]]),
                prefixes=unique([*(entry.get("prefixes") or []), *self._generic["prefixes"]]),
                suffixes=unique([*(entry.get("suffixes") or []), *self._generic["suffixes"]]),
                off_topic_roots=unique(entry.get("off_topic_roots") or []),
            )
        if DEFAULT_INDUSTRY not in industries:
            raise ValueError(f"Lexicon is missing the '{DEFAULT_INDUSTRY}' industry")
        self.industries: Mapping[str, IndustryLexicon] = MappingProxyType(industries)

        vibes: Dict[str, VibeFlavor] = {}
        for name, entry in (raw.get("vibes") or {}).items():
            vibes[name.lower()] = VibeFlavor(
                name=name.lower(),
                modifiers=unique(entry.get("modifiers") or []),
                prefixes=unique(entry.get("prefixes") or []),
                suffixes=unique(entry.get("suffixes") or []),
                nouns=unique(entry.get("nouns") or []),
                terms=unique(entry.get("terms") or []),
                hints=unique(entry.get("hints") or []),
            )
        self.vibes: Mapping[str, VibeFlavor] = MappingProxyType(vibes)
        self.default_vibe = str(raw.get("default_vibe") or "minimal").lower()

        self.stopwords = frozenset(unique(raw.get("stopwords") or []))
        self.thesaurus = self._read_word_map(raw.get("thesaurus"))
        self.keyword_synonyms = self._read_word_map(raw.get("keyword_synonyms"))
        self.industry_hints = MappingProxyType({
            name: unique(words or []) for name, words in (raw.get("industry_hints") or {}).items()
        })
        self.flair_morphemes = unique(raw.get("flair_morphemes") or [])
        self.tasteful_suffixes = unique(raw.get("tasteful_suffixes") or [])
        self.style_suffixes = self._read_word_map(raw.get("style_suffixes"))
        self.generic_penalty_terms = unique(raw.get("generic_penalty_terms") or [])
        self.trademark_fragments = unique(raw.get("trademark_fragments") or [])
        self.dictionary_words = frozenset(unique(raw.get("dictionary_words") or []))
        self.filler_words = unique(raw.get("filler_words") or [])

        entries: Dict[str, MorphemeEntry] = {}
        for item in morphemes:
            fragment = normalise_fragment(item.get("fragment", ""))
            meaning = str(item.get("meaning") or "").strip()
            if len(fragment) < 2 or not meaning or fragment in entries:
                continue
            entries[fragment] = MorphemeEntry(
                fragment=fragment,
                meaning=meaning,
                category=str(item.get("category") or "brand_domain"),
                weight=float(item.get("weight") or 0.8),
            )
        self.morphemes: Tuple[MorphemeEntry, ...] = tuple(entries.values())
        self._morpheme_map: Mapping[str, MorphemeEntry] = MappingProxyType(entries)

    @staticmethod
    def _read_word_map(raw: Optional[dict]) -> Mapping[str, Tuple[str, ...]]:
        return MappingProxyType({
            str(key).strip().lower(): unique(words or [])
            for key, words in (raw or {}).items()
        })

    # -- industries -------------------------------------------------------

    def resolve_industry(self, industry: Optional[str]) -> str:
        """Map free-form input to a known industry name.

        Matches case-insensitively on the full name, then on a unique prefix
        of the name or of any of its ``&``-separated parts. Unknown -> Other.
        """
        if not industry or not industry.strip():
            return DEFAULT_INDUSTRY
        wanted = industry.strip().lower()
        for name in self.industries:
            if name.lower() == wanted:
                return name

        matches = []
        for name in self.industries:
            parts = [name.lower()] + [part.strip() for part in name.lower().split("&")]
            if any(part.startswith(wanted) for part in parts):
                matches.append(name)
        if len(matches) == 1:
            return matches[0]
        return DEFAULT_INDUSTRY

    def industry_lexicon(self, industry: Optional[str]) -> IndustryLexicon:
        return self.industries[self.resolve_industry(industry)]

    def industry_hint_words(self, industry: Optional[str]) -> Tuple[str, ...]:
        if not industry:
            return ()
        return self.industry_hints.get(self.resolve_industry(industry), ())

    # -- vibes ------------------------------------------------------------

    def resolve_vibe(self, vibe: Optional[str]) -> Optional[str]:
        key = (vibe or "").strip().lower()
        return key if key in self.vibes else None

    def vibe_flavor(self, vibe: Optional[str]) -> VibeFlavor:
        return self.vibes.get(self.resolve_vibe(vibe) or self.default_vibe) or next(iter(self.vibes.values()))

    def vibe_terms(self, vibe: Optional[str]) -> Tuple[str, ...]:
        key = self.resolve_vibe(vibe)
        return self.vibes[key].terms if key else ()

    def vibe_hint_words(self, vibe: Optional[str]) -> Tuple[str, ...]:
        key = self.resolve_vibe(vibe)
        return self.vibes[key].hints if key else ()

    def weighted_modifiers(self, vibe: Optional[str], industry: Optional[str]) -> Tuple[str, ...]:
        """Industry modifiers first, then vibe terms, then the generic fallback."""
        lexicon = self.industry_lexicon(industry)
        return unique([*lexicon.modifiers, *self.vibe_terms(vibe), *self._generic["modifiers"]])

    def style_suffix_words(self, style: str) -> Tuple[str, ...]:
        return self.style_suffixes.get(style, ())

    # -- keywords ---------------------------------------------------------

    def parse_keyword_tokens(self, text: str, limit: int = 6) -> Tuple[str, ...]:
        parts = [normalise_token(part) for part in _TOKEN_SPLIT.split(text or "")]
        tokens = [part for part in parts if len(part) >= 2 and part not in self.stopwords]
        return unique(tokens)[:limit]

    def expand_related_terms(self, keyword_tokens: Iterable[str], industry: Optional[str],
                             limit: int = 36) -> Tuple[str, ...]:
        lexicon = self.industry_lexicon(industry)
        keyword_tokens = tuple(keyword_tokens)
        expanded = [*keyword_tokens, *lexicon.roots[:6], *lexicon.modifiers[:4]]
        for token in keyword_tokens:
            expanded.extend(self.thesaurus.get(token, ()))
        return tuple(term for term in unique(expanded) if len(term) >= 2)[:limit]

    def synonyms_for(self, token: str) -> Tuple[str, ...]:
        return self.keyword_synonyms.get(normalise_token(token), ())

    # -- morphemes --------------------------------------------------------

    def morpheme(self, fragment: str) -> Optional[MorphemeEntry]:
        return self._morpheme_map.get(normalise_fragment(fragment))


def _read_yaml(path: Path):
    with open(path) as f:
        return yaml.safe_load(f)


@lru_cache(maxsize=4)
def load_lexicon(lexicon_path: Optional[str] = None, morphemes_path: Optional[str] = None) -> Lexicon:
    """Load (once) and return the lexicon resource."""
    raw = _read_yaml(Path(lexicon_path) if lexicon_path else LEXICON_PATH) or {}
    morphemes = _read_yaml(Path(morphemes_path) if morphemes_path else MORPHEMES_PATH) or []
    return Lexicon(raw, morphemes)
