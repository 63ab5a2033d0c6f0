"""
Degree and institution normalization for CredentialVerify.

Standardizes psychologist degree titles and awarding institutions so that
variants such as "Ph.D. (Psychology)" and "University of Dhaka" reduce to
comparable lower-case token strings.
"""

import re
import logging
from typing import Dict

logger = logging.getLogger(__name__)


class AffiliationNormalizer:
    """
    Normalizes academic affiliations (degree titles and institutions).

    Institution names lose generic words such as "university" so that
    "Dhaka University" and "University of Dhaka" share their distinctive tokens.
    """

    def __init__(self, config: Dict):
        """
        Initialize affiliation normalizer with configuration.

        Args:
            config: Configuration dictionary with normalization rules
        """
        self.config = config
        self.remove_words = [
            word.lower() for word in
            config.get("remove_words", ["university", "college", "institute", "school"])
        ]

        # Compile regex patterns
        self.non_letter_pattern = re.compile(r'[^a-z\s]')
        self.whitespace_pattern = re.compile(r'\s+')
        if self.remove_words:
            self.generic_word_pattern = re.compile(
                r'\b(?:' + '|'.join(map(re.escape, self.remove_words)) + r')\b'
            )
        else:
            self.generic_word_pattern = None

        logger.debug(f"Initialized AffiliationNormalizer with {len(self.remove_words)} generic words")

    def _clean(self, text: str) -> str:
        text = self.non_letter_pattern.sub('', text.lower())
        return self.whitespace_pattern.sub(' ', text).strip()

    def normalize_degree(self, degree: str) -> str:
        """
        Normalize a degree title.

        Args:
            degree: Raw degree title, e.g. "M.Sc. in Clinical Psychology"

        Returns:
            Normalized degree, e.g. "msc in clinical psychology"
        """
        if not isinstance(degree, str):
            return ""

        return self._clean(degree)

    def normalize_specialization(self, specialization: str) -> str:
        """Normalize a specialization, e.g. "Child & Adolescent" -> "child adolescent"."""
        if not isinstance(specialization, str):
            return ""

        return self._clean(specialization)

    def normalize_institution(self, institution: str) -> str:
        """
        Normalize an institution name.

        Args:
            institution: Raw institution, e.g. "University of Dhaka"

        Returns:
            Normalized institution, e.g. "of dhaka"
        """
        if not isinstance(institution, str):
            return ""

        # Strip punctuation before removing generic words so removal sees whole tokens
        institution = self._clean(institution)

        if self.generic_word_pattern is not None:
            institution = self.generic_word_pattern.sub('', institution)

        return self.whitespace_pattern.sub(' ', institution).strip()
