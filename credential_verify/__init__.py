"""
CredentialVerify - Professional Credential Auto-Verification Engine

Scores professional-status applications (psychiatrists and psychologists)
against a pre-approved reference list using field normalization and fuzzy
matching, producing an advisory confidence result for admin review.
"""

__version__ = "1.0.0"
__author__ = "CredentialVerify Team"
