"""
Unit tests for the confidence scorer and band policies.
"""

import pytest
import sys
from pathlib import Path

# Add project root to path
sys.path.append(str(Path(__file__).parent.parent))

from credential_verify.config import BandPolicy, DisplayLevels, get_default_verification_config, merge_configs
from credential_verify.match.scorer import ConfidenceScorer
from credential_verify.models import (
    ApplicantCredential,
    CandidateSearch,
    CredentialType,
    MatchCandidate,
    RecommendationBand,
    ReferenceRecord,
)


REFERENCE = ReferenceRecord(
    email="farhana.rahman@example.com",
    full_name="Dr. Farhana Rahman",
    credential_type=CredentialType.PSYCHIATRIST,
    specialization="Psychiatry",
    registration_number="12345",
    record_id="r1",
)


def applicant(**overrides):
    fields = {
        "credential_type": CredentialType.PSYCHIATRIST,
        "full_name": "Farhana Rahman",
        "email": "farhana.rahman@example.com",
        "registration_number": "12345",
        "specialization": "Psychiatry",
    }
    fields.update(overrides)
    return ApplicantCredential(**fields)


def candidate(record=REFERENCE, signal="registration number equals 12345"):
    return MatchCandidate(record=record, signal=signal, stage="submitted")


class TestConfidenceScorer:
    """Test cases for composite scoring."""

    def setup_method(self):
        """Setup test fixtures."""
        self.config = get_default_verification_config()
        self.scorer = ConfidenceScorer(self.config)

    def test_full_match_is_high(self):
        result = self.scorer.score(applicant(), CandidateSearch(candidates=[candidate()]))

        assert result.score >= 0.85
        assert result.score == pytest.approx(1.0)
        assert result.band == RecommendationBand.HIGH
        assert result.best_match == REFERENCE
        assert result.display_level == "EXCELLENT"
        assert result.sub_scores["base"] == 1.0
        assert result.sub_scores["name"] == 1.0
        assert result.sub_scores["email"] == 1.0
        assert result.sub_scores["specialization"] == 1.0
        assert result.sub_scores["name_match"] == 1.0
        assert "Registration number equals 12345" in result.explanation
        assert "Email exact match" in result.explanation

    def test_registration_only_match_never_high(self):
        result = self.scorer.score(
            applicant(full_name="John Smith", email="jsmith@other.org", specialization="Child Psychiatry"),
            CandidateSearch(candidates=[candidate()]),
        )

        assert 0.40 <= result.score < 0.70
        assert result.band in (RecommendationBand.LOW, RecommendationBand.MEDIUM)
        assert result.band != RecommendationBand.HIGH
        assert result.sub_scores["email"] == 0.0
        assert result.sub_scores["specialization"] == 0.5
        assert result.sub_scores["name_match"] == 0.0

    def test_score_explained_by_sub_scores(self):
        result = self.scorer.score(
            applicant(full_name="Farhan Rahman", email="farhan@example.com"),
            CandidateSearch(candidates=[candidate()]),
        )
        weights = self.config["scoring"]["weights"]
        expected = sum(weights[key] * result.sub_scores[key] for key in weights)

        assert result.score == pytest.approx(expected)
        assert "Email domain match" in result.explanation

    def test_email_equal_ignoring_case_on_dotless_domain(self):
        record = ReferenceRecord(
            email="Farhana@Clinic",
            full_name="Farhana Rahman",
            credential_type=CredentialType.PSYCHIATRIST,
            specialization="Psychiatry",
            registration_number="12345",
        )
        result = self.scorer.score(
            applicant(email="farhana@clinic"),
            CandidateSearch(candidates=[candidate(record)]),
        )

        assert result.sub_scores["email"] == 1.0
        assert result.score == pytest.approx(1.0)
        assert result.band == RecommendationBand.HIGH

    def test_sub_scores_read_only(self):
        result = self.scorer.score(applicant(), CandidateSearch(candidates=[candidate()]))

        with pytest.raises(TypeError):
            result.sub_scores["email"] = 0.0
        assert result.to_dict()["sub_email"] == 1.0

    def test_monotonic_in_sub_scores(self):
        search = CandidateSearch(candidates=[candidate()])
        lower = self.scorer.score(applicant(email="someone@other.org"), search)
        higher = self.scorer.score(applicant(), search)
        assert higher.score > lower.score

        lower = self.scorer.score(applicant(specialization="Forensic Work"), search)
        higher = self.scorer.score(applicant(), search)
        assert higher.score > lower.score

    def test_score_clamped(self):
        config = merge_configs(self.config, {
            "scoring": {"weights": {"base": 1.0, "name": 1.0, "email": 1.0, "specialization": 1.0}}
        })
        scorer = ConfidenceScorer(config)

        result = scorer.score(applicant(), CandidateSearch(candidates=[candidate()]))
        assert result.score == 1.0

    def test_deterministic(self):
        search = CandidateSearch(candidates=[candidate()])
        assert self.scorer.score(applicant(), search) == self.scorer.score(applicant(), search)

    def test_best_of_multiple_candidates(self):
        other = ReferenceRecord(
            email="kamal@example.com",
            full_name="Kamal Hossain",
            credential_type=CredentialType.PSYCHIATRIST,
            specialization="Child Psychiatry",
            registration_number="123456",
            record_id="r2",
        )
        search = CandidateSearch(candidates=[
            candidate(other, "registration number contains 12345"),
            candidate(REFERENCE, "registration number contains 12345"),
        ])

        result = self.scorer.score(applicant(), search)

        assert result.best_match == REFERENCE
        assert "Farhana Rahman" in result.explanation
        assert "Kamal Hossain" not in result.explanation

    def test_ties_keep_matcher_order(self):
        twin = ReferenceRecord(
            email="farhana.rahman@example.com",
            full_name="Farhana Rahman",
            credential_type=CredentialType.PSYCHIATRIST,
            specialization="Psychiatry",
            registration_number="A-12345",
            record_id="r9",
        )
        search = CandidateSearch(candidates=[candidate(twin), candidate(REFERENCE)])

        result = self.scorer.score(applicant(), search)
        assert result.best_match.record_id == "r9"

    def test_missing_field_reason(self):
        search = CandidateSearch(reason="Registration number is required for psychiatrists but was not provided")
        result = self.scorer.score(applicant(registration_number=None), search)

        assert result.score == 0.0
        assert result.band == RecommendationBand.NO_MATCH
        assert result.best_match is None
        assert "registration number" in result.explanation.lower()

    def test_no_candidates_names_search_key(self):
        search = CandidateSearch(stage="digits", search_key="99999")
        result = self.scorer.score(applicant(registration_number="99999"), search)

        assert result.score == 0.0
        assert result.band == RecommendationBand.NO_MATCH
        assert result.display_level == "NO_MATCH"
        assert "No reference entry found for registration number '99999'" == result.explanation

    def test_psychologist_degree_equivalence_check(self):
        record = ReferenceRecord(
            email="sadia@example.com",
            full_name="Sadia Islam",
            credential_type=CredentialType.PSYCHOLOGIST,
            specialization="Clinical Psychology",
            degree_title="Doctor of Psychology",
            degree_institution="University of Dhaka",
        )
        psychologist = ApplicantCredential(
            credential_type=CredentialType.PSYCHOLOGIST,
            full_name="Sadia Islam",
            email="sadia@example.com",
            degree_title="PhD Psychology",
            degree_institution="Dhaka University",
            specialization="Clinical Psychology",
        )

        scored = self.scorer.score_candidate(
            psychologist, MatchCandidate(record=record, signal="degree title contains PhD Psychology",
                                         stage="degree_contains")
        )

        assert scored.sub_scores["degree_match"] == 1.0
        assert scored.sub_scores["institution_match"] == 1.0
        assert "Degree match: Doctor of Psychology" in scored.explanation

    def test_result_views(self):
        result = self.scorer.score(applicant(), CandidateSearch(candidates=[candidate()]))
        assert result.confidence_percentage == "100.0%"
        assert result.recommendation.startswith("HIGH CONFIDENCE")
        assert result.is_match
        assert result.to_dict()["best_match_id"] == "r1"


class TestBandPolicies:
    """Test cases for threshold sets."""

    def test_review_policy_boundaries(self):
        policy = BandPolicy(name="review", high=0.90, medium=0.70)
        assert policy.band_for(1.0) == RecommendationBand.HIGH
        assert policy.band_for(0.90) == RecommendationBand.HIGH
        assert policy.band_for(0.89) == RecommendationBand.MEDIUM
        assert policy.band_for(0.70) == RecommendationBand.MEDIUM
        assert policy.band_for(0.69) == RecommendationBand.LOW
        assert policy.band_for(0.01) == RecommendationBand.LOW
        assert policy.band_for(0.0) == RecommendationBand.NO_MATCH

    def test_auto_eligibility_policy(self):
        policy = BandPolicy.from_config("auto_eligibility", {"high": 0.85, "medium": 0.70})
        assert policy.band_for(0.87) == RecommendationBand.HIGH
        assert policy.band_for(0.84) == RecommendationBand.MEDIUM

    def test_display_levels(self):
        levels = DisplayLevels()
        assert levels.level_for(0.95) == "EXCELLENT"
        assert levels.level_for(0.75) == "GOOD"
        assert levels.level_for(0.60) == "FAIR"
        assert levels.level_for(0.25) == "POOR"
        assert levels.level_for(0.10) == "NO_MATCH"


if __name__ == "__main__":
    pytest.main([__file__])
