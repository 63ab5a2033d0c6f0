"""
Matching engine for CredentialVerify.

Finds reference-list candidates for an applicant and scores them with
fixed, hand-tuned weights over string similarity primitives.
"""
