import dataclasses

import pytest

from e2e_core import Failure, StructuralError
from e2e_core.config import params_512
from e2e_core.group import g_pow, mul_p, rand_q, rand_qs
from e2e_core.keys import (
    combine_key_shares,
    compute_trustee_polynomial,
    decrypt_key_share,
    form_aggregate_key,
    generate_key_pair,
    generate_key_share,
    publish_commitments,
    share_public_key,
    verify_key_share,
    verify_public_key_commitments,
)
from e2e_core.records import IndividualPrivateKey


def test_generate_key_pair(params):
    pub, priv = generate_key_pair(params, 1234, [99])
    assert pub == g_pow(params, 1234)
    assert priv.secret == 1234
    assert priv.coefficients == (1234, 99)


def test_generate_key_pair_samples_when_omitted(params):
    pub, priv = generate_key_pair(params)
    assert len(priv.coefficients) == params.threshold
    assert priv.coefficients[0] == priv.secret
    assert pub == g_pow(params, priv.secret)


def test_wrong_coefficient_count(params):
    with pytest.raises(StructuralError):
        generate_key_pair(params, 5, [])
    with pytest.raises(StructuralError):
        generate_key_pair(params, 5, [1, 2])


def test_trustee_polynomial(params):
    priv = IndividualPrivateKey(secret=5, coefficients=(5, 7))
    assert compute_trustee_polynomial(params, priv, 0) == 5
    assert compute_trustee_polynomial(params, priv, 3) == 26


def test_trustee_polynomial_matches_naive_sum():
    params = params_512(trustees=5, threshold=4)
    _, priv = generate_key_pair(params)
    for x in range(1, 6):
        naive = sum(c * x**j for j, c in enumerate(priv.coefficients)) % params.q
        assert compute_trustee_polynomial(params, priv, x) == naive


def test_polynomial_rejects_malformed_key(params):
    with pytest.raises(StructuralError):
        compute_trustee_polynomial(params, IndividualPrivateKey(secret=1, coefficients=(1,)), 2)
    with pytest.raises(StructuralError):
        compute_trustee_polynomial(params, IndividualPrivateKey(secret=1, coefficients=(2, 3)), 2)


def test_aggregate_key(params, election):
    keys = election["keys"]
    assert form_aggregate_key(params, keys) == mul_p(params, mul_p(params, keys[0], keys[1]), keys[2])
    with pytest.raises(StructuralError):
        form_aggregate_key(params, keys[:2])
    with pytest.raises(StructuralError):
        form_aggregate_key(params, keys[:2] + [params.p - 1])


## --- commitments -----------------------------------------------------------


@pytest.mark.parametrize("trial", range(5))
def test_commitments_always_verify(params, chain, trial):
    base = chain.base_hash()
    _, priv = generate_key_pair(params)
    comms = publish_commitments(chain, base, priv, rand_qs(params, params.threshold))
    assert comms.public_keys[0] == g_pow(params, priv.secret)
    assert verify_public_key_commitments(chain, base, comms).ok is True


def _tamper_proof(comms, index, **changes):
    proofs = list(comms.proofs)
    proofs[index] = dataclasses.replace(proofs[index], **changes)
    return dataclasses.replace(comms, proofs=tuple(proofs))


def test_tampered_commitments_rejected(params, chain, election):
    base = election["base"]
    comms = election["comms"][0]
    q = params.q

    bad_response = _tamper_proof(comms, 1, response=(comms.proofs[1].response + 1) % q)
    assert verify_public_key_commitments(chain, base, bad_response).failure is Failure.EQUATION_MISMATCH

    shifted = _tamper_proof(comms, 1, response=comms.proofs[1].response + q)
    assert verify_public_key_commitments(chain, base, shifted).failure is Failure.STRUCTURAL

    stale = dataclasses.replace(comms, challenge=(comms.challenge + 1) % q)
    assert verify_public_key_commitments(chain, base, stale).failure is Failure.CHALLENGE_MISMATCH

    swapped = dataclasses.replace(
        comms, public_keys=(election["keys"][1],) + comms.public_keys[1:]
    )
    assert verify_public_key_commitments(chain, base, swapped).failure is Failure.CHALLENGE_MISMATCH

    outside = _tamper_proof(comms, 0, commitment=params.p - 1)
    assert verify_public_key_commitments(chain, base, outside).failure is Failure.SUBGROUP_MEMBERSHIP

    short = dataclasses.replace(comms, public_keys=comms.public_keys[:1])
    assert verify_public_key_commitments(chain, base, short).failure is Failure.STRUCTURAL

    assert not verify_public_key_commitments(chain, chain.base_hash(b"other"), comms)


def test_commitments_need_threshold_nonces(params, chain):
    _, priv = generate_key_pair(params)
    with pytest.raises(StructuralError):
        publish_commitments(chain, chain.base_hash(), priv, [1])


## --- key shares ------------------------------------------------------------


def test_key_share_roundtrip_and_feldman_check(params, chain, election):
    base = election["base"]
    privs, keys, comms = election["privs"], election["keys"], election["comms"]
    for j in range(1, params.trustees + 1):
        share = generate_key_share(chain, base, privs[0], j, keys[j - 1])
        assert share.recipient == j
        value = decrypt_key_share(chain, base, privs[j - 1].secret, share)
        assert value == compute_trustee_polynomial(params, privs[0], j)
        assert verify_key_share(params, comms[0], j, value)
        assert not verify_key_share(params, comms[1], j, value)
        assert not verify_key_share(params, comms[0], j, (value + 1) % params.q)


def test_key_share_for_wrong_recipient(params, chain, election):
    base = election["base"]
    privs, keys = election["privs"], election["keys"]
    share = generate_key_share(chain, base, privs[0], 2, keys[1])
    assert decrypt_key_share(chain, base, privs[2].secret, share) != compute_trustee_polynomial(
        params, privs[0], 2
    )
    with pytest.raises(StructuralError):
        generate_key_share(chain, base, privs[0], 0, keys[0])
    with pytest.raises(StructuralError):
        generate_key_share(chain, base, privs[0], params.trustees + 1, keys[0])


def test_share_public_key_matches_combined_share(params, election):
    privs, comms = election["privs"], election["comms"]
    for j in range(1, params.trustees + 1):
        combined = combine_key_shares(
            params, [compute_trustee_polynomial(params, priv, j) for priv in privs]
        )
        assert share_public_key(params, comms, j) == g_pow(params, combined)
    with pytest.raises(StructuralError):
        combine_key_shares(params, [rand_q(params)])
