"""
Reference matcher for CredentialVerify.

Retrieves candidate reference records for an applicant, widening the
search stage by stage and stopping at the first stage that finds anything.
"""

import logging
from typing import Callable, Dict, List, Optional

from thefuzz import fuzz

from ..models import ApplicantCredential, CandidateSearch, CredentialType, MatchCandidate, ReferenceRecord
from ..normalize.affiliation_normalizer import AffiliationNormalizer
from ..normalize.registration_normalizer import RegistrationNormalizer
from ..reference.dataset import LookupCriteria, MatchMode, ReferenceDataset

logger = logging.getLogger(__name__)

# Stage names, in search order
STAGE_SUBMITTED = "submitted"
STAGE_NORMALIZED = "normalized"
STAGE_DIGITS = "digits"
STAGE_DEGREE_INSTITUTION = "degree_institution"
STAGE_DEGREE_CONTAINS = "degree_contains"


class ReferenceMatcher:
    """
    Finds reference-list candidates for psychiatrist and psychologist applicants.

    Psychiatrists are searched by registration number (as submitted, then in
    canonical form, then by digit containment); psychologists by degree and
    institution, falling back to a degree substring search.
    """

    def __init__(self, dataset: ReferenceDataset, config: Dict):
        """
        Initialize reference matcher.

        Args:
            dataset: Reference dataset to query
            config: Full verification configuration
        """
        self.dataset = dataset
        normalization = config.get("normalization", {})
        matching = config.get("matching", {})

        self.registration_normalizer = RegistrationNormalizer(normalization.get("registration", {}))
        self.affiliation_normalizer = AffiliationNormalizer(normalization.get("institution", {}))
        self.min_registration_digits = matching.get("min_registration_digits", 4)

        logger.info("Initialized ReferenceMatcher")

    def _search(self, records: List[ReferenceRecord], stage: str,
                search_key: str, signal: str) -> CandidateSearch:
        candidates = [MatchCandidate(record=record, signal=signal, stage=stage) for record in records]
        logger.debug(f"Stage '{stage}' found {len(candidates)} candidates for key {search_key!r}")
        return CandidateSearch(candidates=candidates, stage=stage, search_key=search_key)

    def _rank(self, records: List[ReferenceRecord], key: str,
              field_value: Callable[[ReferenceRecord], Optional[str]]) -> List[ReferenceRecord]:
        """Stable sort by descending fuzzy ratio of the searched key against a record field."""
        return sorted(records, key=lambda record: -fuzz.ratio(key, field_value(record) or ""))

    def find_psychiatrist_candidates(self, applicant: ApplicantCredential) -> CandidateSearch:
        """
        Find psychiatrist candidates by registration number.

        Args:
            applicant: Applicant credential

        Returns:
            Candidates from the first stage that found any
        """
        submitted = (applicant.registration_number or "").strip()
        if not submitted:
            return CandidateSearch(
                reason="Registration number is required for psychiatrists but was not provided"
            )

        # Stage 1: registration number as submitted
        records = self.dataset.lookup(LookupCriteria(
            credential_type=CredentialType.PSYCHIATRIST,
            fields={"registration_number": submitted},
        ))
        if records:
            return self._search(records, STAGE_SUBMITTED, submitted,
                                f"registration number equals {submitted}")

        # Stage 2: canonical registry form
        normalized = self.registration_normalizer.normalize_registration_number(submitted)
        search_key = normalized or submitted
        if normalized and normalized != submitted:
            records = self.dataset.lookup(LookupCriteria(
                credential_type=CredentialType.PSYCHIATRIST,
                fields={"registration_number": normalized},
            ))
            if records:
                return self._search(records, STAGE_NORMALIZED, normalized,
                                    f"registration number equals {normalized}")

        # Stage 3: digit core containment, only for long enough digit runs
        digits = self.registration_normalizer.registration_digits(submitted)
        if len(digits) < self.min_registration_digits:
            logger.debug(f"Skipping digit containment search: {len(digits)} digits in {submitted!r}")
            return CandidateSearch(stage=STAGE_NORMALIZED, search_key=search_key)

        records = self.dataset.lookup(LookupCriteria(
            credential_type=CredentialType.PSYCHIATRIST,
            fields={"registration_number": digits},
            mode=MatchMode.CONTAINS,
        ))
        records = self._rank(
            records, digits,
            lambda record: self.registration_normalizer.registration_digits(record.registration_number)
        )
        return self._search(records, STAGE_DIGITS, digits, f"registration number contains {digits}")

    def find_psychologist_candidates(self, applicant: ApplicantCredential) -> CandidateSearch:
        """
        Find psychologist candidates by degree title and institution.

        Args:
            applicant: Applicant credential

        Returns:
            Candidates from the first stage that found any
        """
        degree = (applicant.degree_title or "").strip()
        institution = (applicant.degree_institution or "").strip()

        missing = [label for label, value in (("degree title", degree), ("degree institution", institution))
                   if not value]
        if missing:
            return CandidateSearch(
                reason=f"Missing {' and '.join(missing)}: both degree title and degree "
                       f"institution are required for psychologists"
            )

        # Stage 1: degree and institution exactly as submitted
        records = self.dataset.lookup(LookupCriteria(
            credential_type=CredentialType.PSYCHOLOGIST,
            fields={"degree_title": degree, "degree_institution": institution},
        ))
        if records:
            return self._search(records, STAGE_DEGREE_INSTITUTION, f"{degree} from {institution}",
                                f"degree and institution equal {degree} / {institution}")

        # Stage 2: case-insensitive degree substring; a superset the scorer re-ranks
        records = self.dataset.lookup(LookupCriteria(
            credential_type=CredentialType.PSYCHOLOGIST,
            fields={"degree_title": degree},
            mode=MatchMode.ICONTAINS,
        ))
        normalized_degree = self.affiliation_normalizer.normalize_degree(degree)
        records = self._rank(
            records, normalized_degree,
            lambda record: self.affiliation_normalizer.normalize_degree(record.degree_title)
        )
        return self._search(records, STAGE_DEGREE_CONTAINS, f"{degree} from {institution}",
                            f"degree title contains {degree}")
