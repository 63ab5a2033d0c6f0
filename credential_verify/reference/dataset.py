"""
Reference dataset lookup for CredentialVerify.

Defines the read-only query interface the matcher consumes and an
in-memory implementation backed by a snapshot of reference records.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional

import pandas as pd

from ..models import CredentialType, ReferenceRecord

logger = logging.getLogger(__name__)

LOOKUP_FIELDS = (
    "email",
    "full_name",
    "specialization",
    "registration_number",
    "degree_title",
    "degree_institution",
)


class MatchMode(str, Enum):
    EXACT = "exact"
    IEXACT = "iexact"
    CONTAINS = "contains"
    ICONTAINS = "icontains"


@dataclass(frozen=True)
class LookupCriteria:
    """
    Query over the reference dataset.

    Every field in ``fields`` must match under ``mode``; results are always
    scoped to ``credential_type``.
    """

    credential_type: CredentialType
    fields: Dict[str, str] = field(default_factory=dict)
    mode: MatchMode = MatchMode.EXACT

    def describe(self) -> str:
        terms = ", ".join(f"{name}={value!r}" for name, value in self.fields.items())
        return f"{self.credential_type.value} [{terms}] ({self.mode.value})"


class ReferenceDataset(ABC):
    """Read-only query interface over the pre-approved reference list."""

    @abstractmethod
    def lookup(self, criteria: LookupCriteria) -> List[ReferenceRecord]:
        """
        Return all reference records matching the criteria, in dataset order.

        Args:
            criteria: Lookup criteria

        Returns:
            Matching records (empty list when nothing matches)
        """


def _field_matches(value: Optional[str], expected: str, mode: MatchMode) -> bool:
    if value is None or expected is None:
        return False

    if mode == MatchMode.EXACT:
        return value == expected
    if mode == MatchMode.IEXACT:
        return value.lower() == expected.lower()
    if mode == MatchMode.CONTAINS:
        return expected in value
    if mode == MatchMode.ICONTAINS:
        return expected.lower() in value.lower()

    raise ValueError(f"Unsupported match mode: {mode}")


class InMemoryReferenceDataset(ReferenceDataset):
    """
    Reference dataset held in memory and queried by linear scan.

    The record tuple is never mutated; refreshing the reference list means
    building a new dataset snapshot.
    """

    def __init__(self, records: Iterable[ReferenceRecord]):
        self.records = tuple(records)
        logger.info(f"Initialized InMemoryReferenceDataset with {len(self.records)} records")

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame) -> "InMemoryReferenceDataset":
        """
        Build a dataset from a reference-list DataFrame.

        Rows with an unrecognized credential type are skipped with a warning.

        Args:
            df: DataFrame with reference list columns

        Returns:
            In-memory dataset snapshot
        """
        records = []
        skipped = 0

        for row in df.to_dict("records"):
            try:
                records.append(ReferenceRecord.from_mapping(row))
            except ValueError as e:
                skipped += 1
                logger.warning(f"Skipping reference row: {e}")

        if skipped:
            logger.warning(f"Skipped {skipped} of {len(df)} reference rows")

        return cls(records)

    def __len__(self) -> int:
        return len(self.records)

    def lookup(self, criteria: LookupCriteria) -> List[ReferenceRecord]:
        unknown = set(criteria.fields) - set(LOOKUP_FIELDS)
        if unknown:
            raise ValueError(f"Unknown lookup fields: {sorted(unknown)}")

        matches = [
            record for record in self.records
            if record.credential_type == criteria.credential_type
            and all(
                _field_matches(getattr(record, name), expected, criteria.mode)
                for name, expected in criteria.fields.items()
            )
        ]

        logger.debug(f"Lookup {criteria.describe()} returned {len(matches)} records")
        return matches
