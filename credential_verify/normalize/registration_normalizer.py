"""
Registration number normalization for CredentialVerify.

BMDC registration numbers are submitted in many shapes ("A-12345",
"BMDC 12345", "12345"). Matching works on the bare digit core and on a
canonical registry form built from it.
"""

import re
import logging
from typing import Dict

logger = logging.getLogger(__name__)


class RegistrationNormalizer:
    """Normalizes medical council registration numbers."""

    def __init__(self, config: Dict):
        """
        Initialize registration normalizer with configuration.

        Args:
            config: Configuration dictionary with the registry prefix
        """
        self.config = config
        self.registry_prefix = config.get("registry_prefix", "BMDC-")

        # A prefix containing digits would leak into the digit core
        if re.search(r'\d', self.registry_prefix):
            raise ValueError(f"Registry prefix must not contain digits: {self.registry_prefix!r}")

        self.non_digit_pattern = re.compile(r'\D')

    def registration_digits(self, registration_number: str) -> str:
        """
        Extract the bare numeric core of a registration number.

        Args:
            registration_number: Raw registration number

        Returns:
            Digits only, e.g. "A-12345" -> "12345"
        """
        if not isinstance(registration_number, str):
            return ""

        return self.non_digit_pattern.sub('', registration_number)

    def normalize_registration_number(self, registration_number: str) -> str:
        """
        Build the canonical registry form of a registration number.

        Any registry prefix in the input is replaced by the configured one,
        so "bmdc/12345", "A-12345" and "12345" all become "BMDC-12345".

        Args:
            registration_number: Raw registration number

        Returns:
            Canonical form, or "" if the input carries no digits
        """
        digits = self.registration_digits(registration_number)
        if not digits:
            return ""

        return f"{self.registry_prefix}{digits}"
