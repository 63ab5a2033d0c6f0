"""
Reference dataset access for CredentialVerify.

Read-only lookup interface over the pre-approved professional list.
"""
