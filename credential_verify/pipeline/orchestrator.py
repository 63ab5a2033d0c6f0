"""
Verification orchestrator for CredentialVerify.

Runs one application through the matching lifecycle (SUBMITTED -> MATCHING
-> SCORED): dispatches to the credential-type pipeline, scores the
candidates and emits a timestamped result for the admin review workflow.
Scoring never blocks a submission; every failure becomes a NO_MATCH result.
"""

import argparse
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import numpy as np
import pandas as pd

from ..config import DEFAULT_CONFIG_PATH, BandPolicy, get_default_verification_config, load_verification_config
from ..match.reference_matcher import ReferenceMatcher
from ..match.scorer import ConfidenceScorer
from ..models import (
    ApplicantCredential,
    ConfidenceResult,
    CredentialType,
    RecommendationBand,
    ReviewRoute,
    VerificationRecord,
    VerificationStage,
)
from ..reference.dataset import InMemoryReferenceDataset, ReferenceDataset

logger = logging.getLogger(__name__)

PROCESSING_FAILED = "AI processing failed - manual review required"

GATE_ROUTES = {
    RecommendationBand.HIGH: ReviewRoute.RECOMMEND_APPROVAL,
    RecommendationBand.MEDIUM: ReviewRoute.FLAG_FOR_REVIEW,
    RecommendationBand.LOW: ReviewRoute.MANUAL_REVIEW,
    RecommendationBand.NO_MATCH: ReviewRoute.MANUAL_REVIEW,
}


class VerificationOrchestrator:
    """
    Ties the reference matcher and confidence scorer together.

    Holds no per-application state, so one instance can serve concurrent
    submissions against the same reference dataset.
    """

    def __init__(self, dataset: ReferenceDataset, config: Optional[Dict] = None):
        """
        Initialize orchestrator.

        Args:
            dataset: Reference dataset to match against
            config: Verification configuration (defaults when omitted)
        """
        self.config = config if config is not None else get_default_verification_config()
        self.matcher = ReferenceMatcher(dataset, self.config)
        self.scorer = ConfidenceScorer(self.config)

        bands = self.config.get("scoring", {}).get("bands", {})
        self.gate_policy = BandPolicy.from_config(
            "auto_eligibility", bands.get("auto_eligibility", {"high": 0.85, "medium": 0.70})
        )

        logger.info("Initialized VerificationOrchestrator")

    @classmethod
    def from_config_file(cls, dataset: ReferenceDataset,
                         config_path: str = DEFAULT_CONFIG_PATH) -> "VerificationOrchestrator":
        return cls(dataset, load_verification_config(config_path))

    def _run(self, applicant: ApplicantCredential) -> ConfidenceResult:
        credential_type = CredentialType.parse(applicant.credential_type)

        if credential_type == CredentialType.PSYCHIATRIST:
            search = self.matcher.find_psychiatrist_candidates(applicant)
        elif credential_type == CredentialType.PSYCHOLOGIST:
            search = self.matcher.find_psychologist_candidates(applicant)
        else:
            return self.scorer.no_match_result(
                f"Unsupported professional type: {applicant.credential_type}"
            )

        return self.scorer.score(applicant, search)

    def score(self, applicant: ApplicantCredential) -> ConfidenceResult:
        """
        Compute the confidence result for an applicant.

        Deterministic for a given reference dataset snapshot and never raises.

        Args:
            applicant: Applicant credential

        Returns:
            ConfidenceResult (NO_MATCH with an explanation on any failure)
        """
        return self._score(applicant)

    def _score(self, applicant: ApplicantCredential,
               application_id: Optional[str] = None) -> ConfidenceResult:
        try:
            return self._run(applicant)
        except Exception as e:
            logger.error(f"Confidence calculation failed for application {application_id}: {e}")
            return self.scorer.no_match_result(f"{PROCESSING_FAILED}: {e}")

    def route_for(self, result: ConfidenceResult) -> ReviewRoute:
        """Map a result onto the admin queue through the auto-eligibility gate."""
        return GATE_ROUTES[self.gate_policy.band_for(result.score)]

    def process_application(self, application_id: Optional[str],
                            applicant: ApplicantCredential) -> VerificationRecord:
        """
        Run one submitted application through matching and scoring.

        Args:
            application_id: Identifier of the stored application
            applicant: Applicant credential

        Returns:
            VerificationRecord to attach to the application record
        """
        stage = VerificationStage.SUBMITTED
        logger.debug(f"Application {application_id}: {stage.value}")

        stage = VerificationStage.MATCHING
        logger.debug(f"Application {application_id}: {stage.value}")
        result = self._score(applicant, application_id)

        stage = VerificationStage.SCORED
        route = self.route_for(result)
        logger.info(f"Confidence calculated for application {application_id}: "
                    f"{result.confidence_percentage} - {result.band.value} ({route.value})")

        return VerificationRecord(
            application_id=application_id,
            stage=stage,
            result=result,
            route=route,
            processed_at=datetime.now(timezone.utc),
        )

    def score_batch(self, applicants: Iterable[ApplicantCredential],
                    application_ids: Optional[Iterable[Any]] = None) -> pd.DataFrame:
        """
        Score a batch of applicants.

        Args:
            applicants: Applicant credentials
            application_ids: Optional identifiers, one per applicant

        Returns:
            DataFrame with one result row per applicant
        """
        applicants = list(applicants)
        ids = list(application_ids) if application_ids is not None else [None] * len(applicants)
        if len(ids) != len(applicants):
            raise ValueError("application_ids must have one entry per applicant")

        rows = [
            self.process_application(application_id, applicant).to_dict()
            for application_id, applicant in zip(ids, applicants)
        ]

        results_df = pd.DataFrame(rows)
        logger.info(f"Scored {len(results_df)} applications")
        return results_df

    def get_scoring_statistics(self, results_df: pd.DataFrame) -> Dict[str, Any]:
        """
        Calculate scoring statistics for a batch of results.

        Args:
            results_df: DataFrame from score_batch

        Returns:
            Dictionary with score, band and route statistics
        """
        if results_df.empty or "score" not in results_df.columns:
            return {"total_applications": 0}

        scores = results_df["score"].to_numpy(dtype=float)

        return {
            "total_applications": len(results_df),
            "score_statistics": {
                "mean_score": float(np.mean(scores)),
                "median_score": float(np.median(scores)),
                "min_score": float(np.min(scores)),
                "max_score": float(np.max(scores)),
            },
            "band_distribution": {
                band.value: int((results_df["band"] == band.value).sum()) for band in RecommendationBand
            },
            "route_distribution": {
                route.value: int((results_df["route"] == route.value).sum()) for route in ReviewRoute
            },
            "thresholds": {
                "review": {"high": self.scorer.review_policy.high, "medium": self.scorer.review_policy.medium},
                "auto_eligibility": {"high": self.gate_policy.high, "medium": self.gate_policy.medium},
            },
        }


def applicants_from_dataframe(df: pd.DataFrame) -> Iterable[ApplicantCredential]:
    """Yield applicant credentials from an applications DataFrame."""
    for row in df.to_dict("records"):
        yield ApplicantCredential.from_user(
            row.get("credential_type", row.get("professional_type")),
            first_name=row.get("first_name"),
            last_name=row.get("last_name"),
            email=row.get("email", row.get("contact_email")),
            registration_number=row.get("registration_number", row.get("bmdc_number")),
            degree_title=row.get("degree_title"),
            degree_institution=row.get("degree_institution"),
            specialization=row.get("specialization"),
        )


def main():
    """Offline scoring of an applications file against a reference list."""
    parser = argparse.ArgumentParser(description="CredentialVerify offline confidence scoring")
    parser.add_argument("--reference", required=True, help="Reference list CSV path")
    parser.add_argument("--applications", required=True, help="Applications CSV path")
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="Configuration file path")
    parser.add_argument("--output", help="Output CSV path for scoring results")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])

    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        dataset = InMemoryReferenceDataset.from_dataframe(pd.read_csv(args.reference, dtype=str))
        applications_df = pd.read_csv(args.applications, dtype=str)
        orchestrator = VerificationOrchestrator.from_config_file(dataset, args.config)

        ids = applications_df["application_id"] if "application_id" in applications_df.columns else None
        results_df = orchestrator.score_batch(applicants_from_dataframe(applications_df), ids)

        if args.output:
            Path(args.output).parent.mkdir(parents=True, exist_ok=True)
            results_df.to_csv(args.output, index=False)
            logger.info(f"Results saved to {args.output}")

        stats = orchestrator.get_scoring_statistics(results_df)

        print("\n" + "=" * 50)
        print("CONFIDENCE SCORING SUMMARY")
        print("=" * 50)
        print(f"Applications: {stats['total_applications']:,}")
        for band, count in stats.get("band_distribution", {}).items():
            print(f"{band:>10}: {count:,}")
        print("=" * 50)

    except Exception as e:
        logger.error(f"Offline scoring failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
