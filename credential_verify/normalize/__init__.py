"""
Field normalization modules for CredentialVerify.

Canonicalizes free-text credential fields (names, emails, degree titles,
institutions and registration numbers) into comparable forms.
"""
