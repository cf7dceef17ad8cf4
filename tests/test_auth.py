"""
Tests for the authorization gates.

Signed proofs come from django.core.signing; anything tampered with is
ignored rather than trusted.
"""

import pytest
from django.test import RequestFactory

from careplan.auth import AllowListGate, SignedPrincipalGate, sign_principal
from careplan.exceptions import Unauthorized


def test_allow_list_gate():
    gate = AllowListGate({'provider:a'})

    gate.require_auth('provider:a')
    with pytest.raises(Unauthorized) as exc_info:
        gate.require_auth('provider:b')

    assert exc_info.value.detail == {'principal': 'provider:b'}


def test_empty_principal_is_never_authorized():
    with pytest.raises(Unauthorized):
        AllowListGate({''}).require_auth('')


def test_signed_gate_accepts_valid_proof():
    gate = SignedPrincipalGate([sign_principal('patient:john')])

    assert gate.is_authorized('patient:john')
    assert not gate.is_authorized('patient:jane')


def test_signed_gate_ignores_tampered_proof():
    forged = sign_principal('patient:john').replace('patient:john', 'patient:jane')

    gate = SignedPrincipalGate([forged])

    assert not gate.is_authorized('patient:jane')
    assert not gate.is_authorized('patient:john')


def test_signed_gate_reads_comma_separated_header():
    request = RequestFactory().get(
        '/', HTTP_X_PRINCIPAL_PROOF=f"{sign_principal('provider:a')}, {sign_principal('patient:b')}",
    )

    gate = SignedPrincipalGate.from_request(request)

    assert gate.principals == {'provider:a', 'patient:b'}


def test_missing_header_authorizes_nobody():
    gate = SignedPrincipalGate.from_request(RequestFactory().get('/'))

    with pytest.raises(Unauthorized):
        gate.require_auth('provider:a')
