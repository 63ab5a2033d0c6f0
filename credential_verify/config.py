"""
Configuration utilities for CredentialVerify.

Provides configuration loading and validation for normalization, matching
and scoring, plus typed views over the scoring weights and band policies.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

import yaml

from .match.similarity import DEFAULT_DEGREE_ABBREVIATIONS
from .models import RecommendationBand

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/credential_verify.yaml"


def get_default_verification_config() -> Dict[str, Any]:
    """
    Get default verification configuration.

    Returns:
        Default configuration dictionary
    """
    return {
        "normalization": {
            "name": {
                "remove_titles": ["dr", "dr.", "prof", "prof.", "professor"]
            },
            "institution": {
                "remove_words": ["university", "college", "institute", "school"]
            },
            "registration": {
                "registry_prefix": "BMDC-"
            }
        },
        "matching": {
            "min_registration_digits": 4,
            "name_min_token_length": 2,
            "institution_min_token_length": 3,
            "min_shared_tokens": 2,
            "degree_abbreviations": [list(group) for group in DEFAULT_DEGREE_ABBREVIATIONS]
        },
        "scoring": {
            "weights": {
                "base": 0.40,
                "name": 0.25,
                "email": 0.20,
                "specialization": 0.15
            },
            "email_domain_factor": 0.7,
            "bands": {
                "review": {"high": 0.90, "medium": 0.70},
                "auto_eligibility": {"high": 0.85, "medium": 0.70}
            },
            "display_levels": {
                "excellent": 0.90,
                "good": 0.75,
                "fair": 0.50,
                "poor": 0.25
            }
        }
    }


def merge_configs(base_config: Dict[str, Any], override_config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge two configuration dictionaries.

    Args:
        base_config: Base configuration
        override_config: Override configuration

    Returns:
        Merged configuration
    """
    merged = base_config.copy()

    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = value

    return merged


def load_verification_config(config_path: str = DEFAULT_CONFIG_PATH) -> Dict[str, Any]:
    """
    Load verification configuration from YAML file.

    Values in the file override the defaults; missing sections keep their
    default values. An unreadable or invalid file falls back to defaults.

    Args:
        config_path: Path to configuration file

    Returns:
        Configuration dictionary
    """
    defaults = get_default_verification_config()

    try:
        config_file = Path(config_path)
        if not config_file.exists():
            logger.warning(f"Configuration file {config_path} not found, using defaults")
            return defaults

        with open(config_file, 'r') as f:
            file_config = yaml.safe_load(f) or {}

        config = merge_configs(defaults, file_config)
        if not validate_verification_config(config):
            logger.warning(f"Configuration in {config_path} is invalid, using defaults")
            return defaults

        logger.info(f"Loaded verification configuration from {config_path}")
        return config

    except Exception as e:
        logger.error(f"Failed to load configuration from {config_path}: {e}")
        return defaults


def validate_verification_config(config: Dict[str, Any]) -> bool:
    """
    Validate verification configuration.

    Args:
        config: Configuration dictionary

    Returns:
        True if configuration is valid, False otherwise
    """
    required_sections = ["normalization", "matching", "scoring"]

    for section in required_sections:
        if section not in config:
            logger.error(f"Missing required configuration section: {section}")
            return False

    scoring = config["scoring"]
    weights = scoring.get("weights", {})
    for key in ScoringWeights.KEYS:
        value = weights.get(key)
        if not isinstance(value, (int, float)) or not 0 <= value <= 1:
            logger.error(f"scoring.weights.{key} must be a number between 0 and 1")
            return False

    if sum(weights[key] for key in ScoringWeights.KEYS) > 1.0 + 1e-9:
        logger.error("scoring.weights must not sum to more than 1.0")
        return False

    for name, policy in scoring.get("bands", {}).items():
        high = policy.get("high")
        medium = policy.get("medium")
        if not all(isinstance(v, (int, float)) and 0 < v <= 1 for v in (high, medium)):
            logger.error(f"scoring.bands.{name} thresholds must be numbers in (0, 1]")
            return False
        if medium > high:
            logger.error(f"scoring.bands.{name}.medium must not exceed high")
            return False

    levels = [scoring.get("display_levels", {}).get(level) for level in DisplayLevels.LEVELS]
    if not all(isinstance(v, (int, float)) for v in levels) or levels != sorted(levels, reverse=True):
        logger.error("scoring.display_levels must be numbers in descending order")
        return False

    min_digits = config["matching"].get("min_registration_digits", 4)
    if not isinstance(min_digits, int) or min_digits < 1:
        logger.error("matching.min_registration_digits must be a positive integer")
        return False

    logger.debug("Configuration validation passed")
    return True


@dataclass(frozen=True)
class ScoringWeights:
    """Additive weights of the composite confidence score."""

    KEYS = ("base", "name", "email", "specialization")

    base: float = 0.40
    name: float = 0.25
    email: float = 0.20
    specialization: float = 0.15

    @classmethod
    def from_config(cls, weights: Dict[str, float]) -> "ScoringWeights":
        return cls(**{key: float(weights[key]) for key in cls.KEYS if key in weights})


@dataclass(frozen=True)
class BandPolicy:
    """
    Threshold set mapping a score to a recommendation band.

    Lower bounds are inclusive; a score of zero is always NO_MATCH.
    """

    name: str
    high: float
    medium: float

    @classmethod
    def from_config(cls, name: str, policy: Dict[str, float]) -> "BandPolicy":
        return cls(name=name, high=float(policy["high"]), medium=float(policy["medium"]))

    def band_for(self, score: float) -> RecommendationBand:
        if score <= 0.0:
            return RecommendationBand.NO_MATCH
        if score >= self.high:
            return RecommendationBand.HIGH
        if score >= self.medium:
            return RecommendationBand.MEDIUM
        return RecommendationBand.LOW


@dataclass(frozen=True)
class DisplayLevels:
    """Coarse admin-facing confidence levels."""

    LEVELS = ("excellent", "good", "fair", "poor")

    excellent: float = 0.90
    good: float = 0.75
    fair: float = 0.50
    poor: float = 0.25

    @classmethod
    def from_config(cls, levels: Dict[str, float]) -> "DisplayLevels":
        return cls(**{key: float(levels[key]) for key in cls.LEVELS if key in levels})

    def level_for(self, score: float) -> str:
        for level in self.LEVELS:
            if score >= getattr(self, level):
                return level.upper()
        return "NO_MATCH"
