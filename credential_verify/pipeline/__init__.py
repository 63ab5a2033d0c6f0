"""
Verification orchestration for CredentialVerify.
"""
