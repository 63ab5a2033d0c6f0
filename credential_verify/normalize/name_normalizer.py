"""
Name and contact normalization for CredentialVerify.

Standardizes applicant and reference names by removing academic titles,
punctuation and digits, and canonicalizes contact emails for comparison.
"""

import re
import logging
from typing import Dict

logger = logging.getLogger(__name__)


class NameNormalizer:
    """
    Normalizes person names and emails for credential matching.

    Handles leading title removal, case folding and whitespace cleanup.
    """

    def __init__(self, config: Dict):
        """
        Initialize name normalizer with configuration.

        Args:
            config: Configuration dictionary with normalization rules
        """
        self.config = config
        remove_titles = config.get("remove_titles", ["dr", "dr.", "prof", "prof.", "professor"])

        # Titles are matched after punctuation is stripped, so "dr." and "dr" are one title
        titles = sorted({title.lower().replace(".", "").strip() for title in remove_titles if title.strip()})

        self.title_pattern = re.compile(r'^(?:(?:' + '|'.join(map(re.escape, titles)) + r')\s+)+')
        self.non_letter_pattern = re.compile(r'[^a-z\s]')
        self.whitespace_pattern = re.compile(r'\s+')

        logger.debug(f"Initialized NameNormalizer with titles {titles}")

    def normalize_name(self, name: str) -> str:
        """
        Normalize a single person name.

        Args:
            name: Raw name, e.g. "Dr. Farhana Rahman"

        Returns:
            Normalized name, e.g. "farhana rahman"
        """
        if not isinstance(name, str):
            return ""

        name = name.lower()

        # Keep letters and spaces only
        name = self.non_letter_pattern.sub('', name)
        name = self.whitespace_pattern.sub(' ', name).strip()

        # Remove leading titles
        name = self.title_pattern.sub('', name)

        return name

    def normalize_email(self, email: str) -> str:
        """
        Normalize email address.

        Args:
            email: Raw email address

        Returns:
            Normalized email address (lowercase), or "" if not an email
        """
        if not isinstance(email, str):
            return ""

        email = email.strip().lower()

        # Local part and domain must both be present; dotless domains are kept
        local, _, domain = email.rpartition("@")
        if local and domain:
            return email
        else:
            return ""
