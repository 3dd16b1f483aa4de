"""
Credential signers for DocumentDB requests.

Implements the master-key HMAC scheme and resource-token lookup:

    StringToSign = verb\\n + resourceType\\n + resourceId\\n + date\\n + \\n
    Signature = Base64(HMAC-SHA256(UTF8(lower(StringToSign)), Base64Decode(MasterKey)))
    Authorization = urlencode("type=master&ver=1.0&sig=" + Signature)

Author: documentdb-client contributors
Date: 2026-10-19
"""

import base64
import binascii
import hashlib
import hmac
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol
from urllib.parse import quote

from ..exceptions import Unauthorized

logger = logging.getLogger(__name__)

TOKEN_TYPE_MASTER = "master"
TOKEN_VERSION = "1.0"

# Characters left unescaped, matching encodeURIComponent.
_URI_COMPONENT_SAFE = "-_.!~*'()"


class CredentialSigner(Protocol):
    """Computes the authorization header value for one request."""

    def sign(self, verb: str, resource_type: str, resource_id: str, utc_date: str) -> str:
        ...


def build_string_to_sign(verb: str, resource_type: str, resource_id: str, utc_date: str) -> str:
    """
    Build the string signed by the master key.

    Args:
        verb: HTTP method
        resource_type: Path keyword of the addressed resource (e.g. 'docs')
        resource_id: Link of the addressed resource (parent link for feeds)
        utc_date: RFC 1123 date sent in x-ms-date

    Returns:
        String to sign
    """
    return (
        f"{verb.lower()}\n"
        f"{resource_type.lower()}\n"
        f"{resource_id}\n"
        f"{utc_date.lower()}\n"
        "\n"
    )


def compute_signature(string_to_sign: str, master_key: str) -> str:
    """
    Compute HMAC-SHA256 signature.

    Args:
        string_to_sign: Canonical string
        master_key: Base64-encoded master key

    Returns:
        Base64-encoded signature
    """
    key_bytes = base64.b64decode(master_key)

    signature_bytes = hmac.new(
        key_bytes,
        string_to_sign.encode("utf-8"),
        hashlib.sha256
    ).digest()

    return base64.b64encode(signature_bytes).decode("utf-8")


class MasterKeySigner:
    """Signs every request with the account master key."""

    def __init__(self, master_key: str):
        try:
            base64.b64decode(master_key, validate=True)
        except (binascii.Error, ValueError) as e:
            raise Unauthorized(message=f"Master key is not valid base64: {e}") from e
        self._master_key = master_key

    def sign(self, verb: str, resource_type: str, resource_id: str, utc_date: str) -> str:
        string_to_sign = build_string_to_sign(verb, resource_type, resource_id, utc_date)
        signature = compute_signature(string_to_sign, self._master_key)
        token = f"type={TOKEN_TYPE_MASTER}&ver={TOKEN_VERSION}&sig={signature}"
        return quote(token, safe=_URI_COMPONENT_SAFE)

    def __repr__(self) -> str:
        return "MasterKeySigner(master_key=***REDACTED***)"


class ResourceTokenSigner:
    """
    Picks a pre-issued resource token for each request.

    Tokens are keyed by resource link (or bare resource id). A request for a
    resource without its own token uses the token of its nearest ancestor.
    """

    def __init__(self, resource_tokens: Mapping[str, str]):
        self._tokens: Dict[str, str] = {k.strip("/"): v for k, v in resource_tokens.items()}

    @classmethod
    def from_permission_feed(cls, permissions: Iterable[Mapping[str, Any]]) -> "ResourceTokenSigner":
        """Build from permission resources carrying 'resource' and '_token'."""
        tokens: Dict[str, str] = {}
        for permission in permissions:
            resource = permission.get("resource")
            token = permission.get("_token")
            if not resource or not token:
                raise Unauthorized(message="Permission feed entries need 'resource' and '_token'")
            tokens[str(resource)] = str(token)
        return cls(tokens)

    def _candidates(self, resource_id: str) -> List[str]:
        parts = resource_id.strip("/").split("/") if resource_id.strip("/") else []
        candidates = []
        for end in range(len(parts), 0, -1):
            prefix = parts[:end]
            candidates.append("/".join(prefix))
            if end % 2 == 0:
                candidates.append(prefix[-1])
        return candidates

    def sign(self, verb: str, resource_type: str, resource_id: str, utc_date: str) -> str:
        for candidate in self._candidates(resource_id):
            token = self._tokens.get(candidate)
            if token:
                return token
        raise Unauthorized(
            message=f"No resource token covers '{resource_id or '/'}' ({resource_type})"
        )

    def __repr__(self) -> str:
        return f"ResourceTokenSigner(resources={sorted(self._tokens)})"


def select_signer(
    master_key: Optional[str] = None,
    resource_tokens: Optional[Mapping[str, str]] = None,
    permission_feed: Optional[Iterable[Mapping[str, Any]]] = None
) -> CredentialSigner:
    """
    Choose the signer for a client's credentials.

    Master key and resource tokens together have no defined precedence and
    are rejected rather than silently preferring one.

    Raises:
        Unauthorized: When no credential, or both kinds, are configured
    """
    tokens: Dict[str, str] = dict(resource_tokens or {})
    if permission_feed:
        tokens.update(ResourceTokenSigner.from_permission_feed(permission_feed)._tokens)

    if master_key and tokens:
        raise Unauthorized(
            message=(
                "Both a master key and resource tokens are configured; "
                "precedence is ambiguous. Configure exactly one."
            )
        )
    if master_key:
        logger.debug("Using master key authorization")
        return MasterKeySigner(master_key)
    if tokens:
        logger.debug(f"Using resource token authorization for {len(tokens)} resources")
        return ResourceTokenSigner(tokens)
    raise Unauthorized(message="No credentials configured: provide a master key or resource tokens")
