"""
Data model for CredentialVerify.

Immutable records passed between the matcher, scorer and orchestrator:
applicant credentials, reference records, match candidates and the
confidence results handed to the admin review workflow.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

import pandas as pd


class CredentialType(str, Enum):
    """Professional type; decides which fields are authoritative."""

    PSYCHIATRIST = "PSYCHIATRIST"
    PSYCHOLOGIST = "PSYCHOLOGIST"

    @classmethod
    def parse(cls, value: Any) -> Optional["CredentialType"]:
        """
        Parse a credential type from an enum member or a string.

        Args:
            value: Enum member or case-insensitive type name

        Returns:
            Matching CredentialType, or None if unrecognized
        """
        if isinstance(value, cls):
            return value
        if value is None or not isinstance(value, str):
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


class RecommendationBand(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    NO_MATCH = "NO_MATCH"


class ReviewRoute(str, Enum):
    """Admin queue routing derived from the auto-eligibility gate."""

    RECOMMEND_APPROVAL = "RECOMMEND_APPROVAL"
    FLAG_FOR_REVIEW = "FLAG_FOR_REVIEW"
    MANUAL_REVIEW = "MANUAL_REVIEW"


class VerificationStage(str, Enum):
    SUBMITTED = "SUBMITTED"
    MATCHING = "MATCHING"
    SCORED = "SCORED"


BAND_RECOMMENDATIONS = {
    RecommendationBand.HIGH: "HIGH CONFIDENCE - Recommend approval",
    RecommendationBand.MEDIUM: "MEDIUM CONFIDENCE - Verify manually",
    RecommendationBand.LOW: "LOW CONFIDENCE - Requires careful review",
    RecommendationBand.NO_MATCH: "MANUAL REVIEW - No reference data, manual review mandatory",
}


def _clean(value: Any) -> Optional[str]:
    """Convert a raw cell value to a stripped string, or None if missing."""
    if value is None:
        return None
    if not isinstance(value, str) and pd.isna(value):
        return None
    # Numeric columns with gaps load as float: 12345.0 -> "12345"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    value = str(value).strip()
    return value or None


@dataclass(frozen=True)
class ApplicantCredential:
    """Credentials submitted with a professional-status application."""

    credential_type: Optional[CredentialType]
    full_name: str = ""
    email: str = ""
    registration_number: Optional[str] = None
    degree_title: Optional[str] = None
    degree_institution: Optional[str] = None
    specialization: Optional[str] = None

    @classmethod
    def from_user(cls, credential_type: Any,
                  first_name: Optional[str] = None,
                  last_name: Optional[str] = None,
                  **fields) -> "ApplicantCredential":
        """
        Build an applicant credential from the applicant's user profile.

        Args:
            credential_type: Credential type (enum or string)
            first_name: Applicant first name (may be missing)
            last_name: Applicant last name (may be missing)
            **fields: Remaining credential fields; a full_name is used only
                when neither first nor last name is given

        Returns:
            ApplicantCredential with the joined full name
        """
        full_name = _clean(fields.pop("full_name", None))
        parts = [part for part in (_clean(first_name), _clean(last_name)) if part]
        parsed_type = CredentialType.parse(credential_type)
        return cls(
            credential_type=parsed_type if parsed_type else credential_type,
            full_name=" ".join(parts) or full_name or "",
            email=_clean(fields.pop("email", None)) or "",
            **{key: _clean(value) for key, value in fields.items()}
        )


@dataclass(frozen=True)
class ReferenceRecord:
    """Entry of the pre-approved reference list."""

    email: str
    full_name: str
    credential_type: CredentialType
    specialization: Optional[str] = None
    registration_number: Optional[str] = None
    degree_title: Optional[str] = None
    degree_institution: Optional[str] = None
    record_id: Optional[str] = None

    @classmethod
    def from_mapping(cls, row: Dict[str, Any]) -> "ReferenceRecord":
        """
        Build a reference record from a dict or DataFrame row.

        Accepts the reference list column names, including the ``bmdc_number``
        and ``professional_type`` aliases used by the admin upload format.
        """
        credential_type = CredentialType.parse(
            row.get("credential_type", row.get("professional_type"))
        )
        if credential_type is None:
            raise ValueError(f"Unrecognized credential type in reference row: {row}")

        record_id = _clean(row.get("record_id", row.get("id")))
        return cls(
            email=_clean(row.get("email")) or "",
            full_name=_clean(row.get("full_name")) or "",
            credential_type=credential_type,
            specialization=_clean(row.get("specialization")),
            registration_number=_clean(row.get("registration_number", row.get("bmdc_number"))),
            degree_title=_clean(row.get("degree_title")),
            degree_institution=_clean(row.get("degree_institution")),
            record_id=record_id,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["credential_type"] = self.credential_type.value
        return data


@dataclass(frozen=True)
class MatchCandidate:
    """A reference record paired with the partial-match signal that found it."""

    record: ReferenceRecord
    signal: str
    stage: str


@dataclass(frozen=True)
class CandidateSearch:
    """
    Outcome of a reference-matcher search.

    ``search_key`` is the normalized key the last executed stage searched
    for; ``reason`` is set when the search was short-circuited because the
    applicant did not provide the required fields.
    """

    candidates: List[MatchCandidate] = field(default_factory=list)
    stage: Optional[str] = None
    search_key: str = ""
    reason: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.candidates


@dataclass(frozen=True)
class ConfidenceResult:
    """Advisory confidence result attached to an application for admin review."""

    score: float
    band: RecommendationBand
    best_match: Optional[ReferenceRecord]
    explanation: str
    sub_scores: Mapping[str, float] = field(default_factory=dict)
    display_level: str = "NO_MATCH"

    def __post_init__(self):
        object.__setattr__(self, "sub_scores", MappingProxyType(dict(self.sub_scores)))

    @property
    def recommendation(self) -> str:
        return BAND_RECOMMENDATIONS[self.band]

    @property
    def confidence_percentage(self) -> str:
        return f"{self.score * 100:.1f}%"

    @property
    def is_match(self) -> bool:
        return self.best_match is not None and self.band != RecommendationBand.NO_MATCH

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "band": self.band.value,
            "display_level": self.display_level,
            "recommendation": self.recommendation,
            "explanation": self.explanation,
            "best_match_email": self.best_match.email if self.best_match else None,
            "best_match_name": self.best_match.full_name if self.best_match else None,
            "best_match_id": self.best_match.record_id if self.best_match else None,
            **{f"sub_{key}": value for key, value in self.sub_scores.items()},
        }


@dataclass(frozen=True)
class VerificationRecord:
    """Scoring outcome emitted to the external application-record store."""

    application_id: Optional[str]
    stage: VerificationStage
    result: ConfidenceResult
    route: ReviewRoute
    processed_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "application_id": self.application_id,
            "stage": self.stage.value,
            "route": self.route.value,
            "processed_at": self.processed_at.isoformat(),
            **self.result.to_dict(),
        }
