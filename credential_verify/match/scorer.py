"""
Confidence scorer for CredentialVerify.

Scores each reference candidate against the applicant with a fixed additive
weighting model and turns the best candidate into a ConfidenceResult with a
recommendation band and an explanation of the contributing sub-scores.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np

from ..config import BandPolicy, DisplayLevels, ScoringWeights
from ..models import (
    ApplicantCredential,
    CandidateSearch,
    ConfidenceResult,
    CredentialType,
    MatchCandidate,
    RecommendationBand,
)
from ..normalize.affiliation_normalizer import AffiliationNormalizer
from ..normalize.name_normalizer import NameNormalizer
from .similarity import (
    DEFAULT_DEGREE_ABBREVIATIONS,
    degrees_match,
    edit_similarity,
    email_similarity,
    institutions_match,
    names_match,
    token_overlap_ratio,
)

logger = logging.getLogger(__name__)

SEARCH_KEY_LABELS = {
    CredentialType.PSYCHIATRIST: "registration number",
    CredentialType.PSYCHOLOGIST: "degree",
}


@dataclass(frozen=True)
class CandidateScore:
    """Composite score of one candidate with its sub-scores."""

    candidate: MatchCandidate
    score: float
    sub_scores: Dict[str, float]
    explanation: str


class ConfidenceScorer:
    """
    Weighted confidence scorer for applicant/reference pairs.

    Every candidate that reached the scorer already satisfied the matcher's
    primary criterion and receives the flat base component; name, email and
    specialization similarity add their weighted shares on top.
    """

    def __init__(self, config: Dict):
        """
        Initialize confidence scorer with configuration.

        Args:
            config: Full verification configuration
        """
        self.config = config
        normalization = config.get("normalization", {})
        matching = config.get("matching", {})
        scoring = config.get("scoring", {})

        self.weights = ScoringWeights.from_config(scoring.get("weights", {}))
        self.email_domain_factor = scoring.get("email_domain_factor", 0.7)
        self.review_policy = BandPolicy.from_config(
            "review", scoring.get("bands", {}).get("review", {"high": 0.90, "medium": 0.70})
        )
        self.display_levels = DisplayLevels.from_config(scoring.get("display_levels", {}))

        self.name_min_token_length = matching.get("name_min_token_length", 2)
        self.institution_min_token_length = matching.get("institution_min_token_length", 3)
        self.min_shared_tokens = matching.get("min_shared_tokens", 2)
        self.degree_abbreviations = [
            tuple(group) for group in matching.get("degree_abbreviations", DEFAULT_DEGREE_ABBREVIATIONS)
        ]

        self.name_normalizer = NameNormalizer(normalization.get("name", {}))
        self.affiliation_normalizer = AffiliationNormalizer(normalization.get("institution", {}))

        logger.info(f"Initialized ConfidenceScorer with weights {self.weights}")

    def _credential_checks(self, applicant: ApplicantCredential,
                           candidate: MatchCandidate) -> Dict[str, float]:
        """Binary field checks reported alongside the weighted sub-scores."""
        record = candidate.record
        checks = {
            "name_match": float(names_match(
                self.name_normalizer.normalize_name(applicant.full_name),
                self.name_normalizer.normalize_name(record.full_name),
                self.name_min_token_length, self.min_shared_tokens
            ))
        }

        if record.credential_type == CredentialType.PSYCHOLOGIST:
            checks["degree_match"] = float(degrees_match(
                self.affiliation_normalizer.normalize_degree(applicant.degree_title),
                self.affiliation_normalizer.normalize_degree(record.degree_title),
                self.degree_abbreviations
            ))
            checks["institution_match"] = float(institutions_match(
                self.affiliation_normalizer.normalize_institution(applicant.degree_institution),
                self.affiliation_normalizer.normalize_institution(record.degree_institution),
                self.institution_min_token_length, self.min_shared_tokens
            ))

        return checks

    def score_candidate(self, applicant: ApplicantCredential, candidate: MatchCandidate) -> CandidateScore:
        """
        Calculate the composite confidence score of one candidate.

        Args:
            applicant: Applicant credential
            candidate: Reference candidate found by the matcher

        Returns:
            CandidateScore with sub-scores and explanation
        """
        record = candidate.record

        name_similarity = edit_similarity(
            self.name_normalizer.normalize_name(applicant.full_name),
            self.name_normalizer.normalize_name(record.full_name)
        )
        email_score = email_similarity(
            self.name_normalizer.normalize_email(applicant.email),
            self.name_normalizer.normalize_email(record.email),
            self.email_domain_factor
        )
        specialization_overlap = token_overlap_ratio(
            self.affiliation_normalizer.normalize_specialization(applicant.specialization),
            self.affiliation_normalizer.normalize_specialization(record.specialization)
        )

        components = {
            "base": 1.0,
            "name": float(np.clip(name_similarity, 0.0, 1.0)),
            "email": float(np.clip(email_score, 0.0, 1.0)),
            "specialization": float(np.clip(specialization_overlap, 0.0, 1.0)),
        }
        contributions = {key: getattr(self.weights, key) * value for key, value in components.items()}
        score = float(np.clip(sum(contributions.values()), 0.0, 1.0))

        checks = self._credential_checks(applicant, candidate)

        details = [candidate.signal[:1].upper() + candidate.signal[1:]]
        if checks.get("degree_match"):
            details.append(f"Degree match: {record.degree_title}")
        if checks.get("institution_match"):
            details.append(f"Institution match: {record.degree_institution}")
        details.append(f"Name similarity {components['name']:.2f} (+{contributions['name']:.3f})")
        if components["email"] == 1.0:
            details.append(f"Email exact match (+{contributions['email']:.3f})")
        elif components["email"] > 0.0:
            details.append(f"Email domain match (+{contributions['email']:.3f})")
        else:
            details.append("Email mismatch (+0.000)")
        details.append(
            f"Specialization overlap {components['specialization']:.2f} (+{contributions['specialization']:.3f})"
        )

        explanation = (
            f"{'; '.join(details)}. Base credential match +{contributions['base']:.3f}, "
            f"total {score:.3f}. Professional: {record.full_name} <{record.email}>"
        )

        return CandidateScore(
            candidate=candidate,
            score=score,
            sub_scores={**components, **checks},
            explanation=explanation,
        )

    def no_match_result(self, explanation: str) -> ConfidenceResult:
        """Build a zero-score NO_MATCH result with the given explanation."""
        return ConfidenceResult(
            score=0.0,
            band=RecommendationBand.NO_MATCH,
            best_match=None,
            explanation=explanation,
            display_level=self.display_levels.level_for(0.0),
        )

    def score_candidates(self, applicant: ApplicantCredential,
                         candidates: List[MatchCandidate]) -> Optional[CandidateScore]:
        """
        Score all candidates and return the best one.

        Ties keep the first candidate in matcher order.

        Returns:
            Best CandidateScore, or None when there are no candidates
        """
        best: Optional[CandidateScore] = None

        for candidate in candidates:
            scored = self.score_candidate(applicant, candidate)
            if best is None or scored.score > best.score:
                best = scored

        return best

    def score(self, applicant: ApplicantCredential, search: CandidateSearch) -> ConfidenceResult:
        """
        Produce the confidence result for an applicant's candidate search.

        Args:
            applicant: Applicant credential
            search: Matcher output

        Returns:
            ConfidenceResult for the best-scoring candidate
        """
        if search.reason:
            return self.no_match_result(search.reason)

        best = self.score_candidates(applicant, search.candidates)
        if best is None:
            label = SEARCH_KEY_LABELS.get(CredentialType.parse(applicant.credential_type), "key")
            return self.no_match_result(
                f"No reference entry found for {label} {search.search_key!r}"
            )

        logger.debug(f"Best of {len(search.candidates)} candidates scored {best.score:.3f}")

        return ConfidenceResult(
            score=best.score,
            band=self.review_policy.band_for(best.score),
            best_match=best.candidate.record,
            explanation=best.explanation,
            sub_scores=best.sub_scores,
            display_level=self.display_levels.level_for(best.score),
        )
