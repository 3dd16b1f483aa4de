"""
DocumentDB Authorization Module.

Master-key and resource-token signers for outbound requests.
"""

from documentdb.auth.signer import (
    CredentialSigner,
    MasterKeySigner,
    ResourceTokenSigner,
    build_string_to_sign,
    compute_signature,
    select_signer,
)

__all__ = [
    "CredentialSigner",
    "MasterKeySigner",
    "ResourceTokenSigner",
    "build_string_to_sign",
    "compute_signature",
    "select_signer",
]
