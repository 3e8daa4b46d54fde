"""Settings loaded from config/config.yaml."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

DEFAULT_CONFIG_PATH = "config/config.yaml"


def clamp(value, low, high):
    return max(low, min(high, value))


def _number(raw: Dict[str, Any], key: str, default, low, high, cast=float):
    value = raw.get(key, default)
    try:
        value = cast(value)
    except (TypeError, ValueError):
        value = default
    return clamp(value, low, high)


def _flag(raw: Dict[str, Any], key: str, default: bool) -> bool:
    value = raw.get(key, default)
    return value if isinstance(value, bool) else default


def _tld(value) -> str:
    return str(value).strip().lower().lstrip('.')


@dataclass(frozen=True)
class SearchSettings:
    target_count: int = 5
    max_length: int = 10
    min_length: int = 4
    max_attempts: int = 8
    time_budget_seconds: float = 45.0
    max_total_lookups: int = 1000
    batch_size: int = 40
    shortlist_size: int = 280
    pool_size: int = 720
    primary_tld: str = "com"
    alternate_tlds: Tuple[str, ...] = ("io", "ai", "co")
    near_miss_shortlist: int = 16
    max_near_misses: int = 6

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "SearchSettings":
        alternates = raw.get("alternate_tlds", cls.alternate_tlds)
        if isinstance(alternates, str):
            alternates = alternates.split(",")
        primary = _tld(raw.get("primary_tld", cls.primary_tld)) or cls.primary_tld
        return cls(
            target_count=_number(raw, "target_count", cls.target_count, 1, 10, int),
            max_length=_number(raw, "max_length", cls.max_length, 5, 24, int),
            min_length=_number(raw, "min_length", cls.min_length, 2, 12, int),
            max_attempts=_number(raw, "max_attempts", cls.max_attempts, 1, 8, int),
            time_budget_seconds=_number(raw, "time_budget_seconds", cls.time_budget_seconds, 1.0, 600.0),
            max_total_lookups=_number(raw, "max_total_lookups", cls.max_total_lookups, 1, 20000, int),
            batch_size=_number(raw, "batch_size", cls.batch_size, 1, 200, int),
            shortlist_size=_number(raw, "shortlist_size", cls.shortlist_size, 10, 2000, int),
            pool_size=_number(raw, "pool_size", cls.pool_size, 340, 1600, int),
            primary_tld=primary,
            alternate_tlds=tuple(t for t in (_tld(a) for a in alternates) if t and t != primary),
            near_miss_shortlist=_number(raw, "near_miss_shortlist", cls.near_miss_shortlist, 0, 100, int),
            max_near_misses=_number(raw, "max_near_misses", cls.max_near_misses, 0, 50, int),
        )


@dataclass(frozen=True)
class AvailabilitySettings:
    concurrency: int = 8
    max_retries: int = 2
    backoff_ms: int = 160
    ttl_seconds: int = 24 * 60 * 60
    dns_timeout: float = 3.0
    whois_timeout: float = 10.0
    verify_with_whois: bool = False
    rate_limit_delay: float = 1.5

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "AvailabilitySettings":
        return cls(
            concurrency=_number(raw, "concurrency", cls.concurrency, 1, 16, int),
            max_retries=_number(raw, "max_retries", cls.max_retries, 0, 5, int),
            backoff_ms=_number(raw, "backoff_ms", cls.backoff_ms, 0, 5000, int),
            ttl_seconds=_number(raw, "ttl_seconds", cls.ttl_seconds, 0, 7 * 24 * 60 * 60, int),
            dns_timeout=_number(raw, "dns_timeout", cls.dns_timeout, 0.5, 30.0),
            whois_timeout=_number(raw, "whois_timeout", cls.whois_timeout, 1.0, 60.0),
            verify_with_whois=_flag(raw, "verify_with_whois", cls.verify_with_whois),
            rate_limit_delay=_number(raw, "rate_limit_delay", cls.rate_limit_delay, 0.0, 30.0),
        )


@dataclass(frozen=True)
class ScoringSettings:
    high_band: float = 22.0
    medium_band: float = 15.0
    floor_percentile: float = 0.22
    floor_minimum: float = 13.0
    floor_margin: float = 1.2
    floor_stage_step: float = 0.45

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "ScoringSettings":
        high = _number(raw, "high_band", cls.high_band, -50.0, 100.0)
        return cls(
            high_band=high,
            medium_band=_number(raw, "medium_band", cls.medium_band, -50.0, high),
            floor_percentile=_number(raw, "floor_percentile", cls.floor_percentile, 0.0, 1.0),
            floor_minimum=_number(raw, "floor_minimum", cls.floor_minimum, -50.0, 100.0),
            floor_margin=_number(raw, "floor_margin", cls.floor_margin, 0.0, 20.0),
            floor_stage_step=_number(raw, "floor_stage_step", cls.floor_stage_step, 0.0, 5.0),
        )


@dataclass(frozen=True)
class Settings:
    search: SearchSettings = field(default_factory=SearchSettings)
    availability: AvailabilitySettings = field(default_factory=AvailabilitySettings)
    scoring: ScoringSettings = field(default_factory=ScoringSettings)

    @classmethod
    def from_dict(cls, raw: Optional[Dict[str, Any]]) -> "Settings":
        raw = raw or {}
        return cls(
            search=SearchSettings.from_dict(raw.get("search") or {}),
            availability=AvailabilitySettings.from_dict(raw.get("availability") or {}),
            scoring=ScoringSettings.from_dict(raw.get("scoring") or {}),
        )


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> Settings:
    """Load configuration from YAML file. A missing file yields defaults."""
    config_file = Path(config_path)
    if config_file.exists():
        with open(config_file) as f:
            return Settings.from_dict(yaml.safe_load(f))
    return Settings()
