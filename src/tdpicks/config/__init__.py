"""Configuration helpers for weighting profiles, tiers and quotas."""

from .profiles import (
    DEFAULT_PROFILE,
    DEFAULT_QUOTA,
    DEFAULT_TIER,
    INJURY_PENALTIES,
    SIGNALS,
    TIER_RULES,
    QuotaRules,
    TierRule,
    WeightingProfile,
    get_profile,
    get_quota_rules,
    iter_profiles,
    iter_quota_rules,
)
from .settings import Settings, load_settings

__all__ = [
    "DEFAULT_PROFILE",
    "DEFAULT_QUOTA",
    "DEFAULT_TIER",
    "INJURY_PENALTIES",
    "SIGNALS",
    "TIER_RULES",
    "QuotaRules",
    "Settings",
    "TierRule",
    "WeightingProfile",
    "get_profile",
    "get_quota_rules",
    "iter_profiles",
    "iter_quota_rules",
    "load_settings",
]
