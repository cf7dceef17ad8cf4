"""
Authorization gates.

The service never decides who may act; it only asks a gate whether the
current call carries proof of a given principal. Proofs are tokens signed
with django.core.signing, so a principal cannot be asserted without the key.
"""

import logging

from django.conf import settings
from django.core import signing

from .exceptions import Unauthorized

logger = logging.getLogger(__name__)

PROOF_HEADER = 'HTTP_X_PRINCIPAL_PROOF'


class AuthorizationGate:

    def is_authorized(self, principal):
        raise NotImplementedError

    def require_auth(self, principal):
        if not principal or not self.is_authorized(principal):
            logger.warning(f"Rejected call: no proof of principal {principal!r}")
            raise Unauthorized(
                message=f"Call does not carry proof of principal '{principal}'.",
                detail={'principal': principal},
            )


class AllowListGate(AuthorizationGate):
    """Trusts a fixed set of principals. For tests and management commands."""

    def __init__(self, principals=()):
        self.principals = set(principals)

    def is_authorized(self, principal):
        return principal in self.principals


def _signer():
    return signing.Signer(salt=settings.CAREPLAN_PRINCIPAL_SALT)


def sign_principal(principal):
    return _signer().sign(principal)


class SignedPrincipalGate(AuthorizationGate):
    """Authorizes exactly the principals whose signed proofs verify."""

    def __init__(self, proofs=()):
        self.principals = set()
        signer = _signer()
        for proof in proofs:
            try:
                self.principals.add(signer.unsign(proof))
            except signing.BadSignature:
                logger.warning("Discarding principal proof with a bad signature")

    @classmethod
    def from_request(cls, request):
        header = request.META.get(PROOF_HEADER, '')
        return cls([p.strip() for p in header.split(',') if p.strip()])

    def is_authorized(self, principal):
        return principal in self.principals
