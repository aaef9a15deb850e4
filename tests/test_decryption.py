from itertools import combinations

import pytest

from e2e_core import StructuralError
from e2e_core.decryption import (
    check_tally,
    discrete_log_bsgs,
    discrete_log_small,
    full_decrypt,
    lagrange_coefficient,
    tally_value,
    threshold_decrypt,
    trustee_decrypt,
)
from e2e_core.encryption import encrypt_contest, encrypt_selection
from e2e_core.group import g_pow, rand_qs
from e2e_core.keys import combine_key_shares, compute_trustee_polynomial, generate_key_pair


def test_worked_example_single_trustee(toy):
    pub, priv = generate_key_pair(toy, 3, [])
    assert pub == 18
    msg = encrypt_selection(toy, pub, 1, nonce=2)
    share = trustee_decrypt(toy, priv, msg)
    assert share == 2
    value = full_decrypt(toy, [share], msg)
    assert value == 4
    assert check_tally(toy, value, 1)
    assert not check_tally(toy, value, 0)


def test_full_contest_decrypts_to_selection_count(params, election):
    contest = [1, 0, 1]
    msg = encrypt_contest(params, election["joint_key"], contest, rand_qs(params, 3))
    shares = [trustee_decrypt(params, priv, msg) for priv in election["privs"]]
    value = full_decrypt(params, shares, msg)
    assert value == g_pow(params, 2)
    assert check_tally(params, value, 2)
    for other in (0, 1, 3, 4):
        assert not check_tally(params, value, other)


def test_full_decrypt_needs_every_trustee(params, election):
    msg = encrypt_selection(params, election["joint_key"], 1)
    shares = [trustee_decrypt(params, priv, msg) for priv in election["privs"]]
    with pytest.raises(StructuralError):
        full_decrypt(params, shares[:2], msg)
    # a missing trustee cannot be replaced by a duplicate
    value = full_decrypt(params, shares[:2] + shares[:1], msg)
    assert not check_tally(params, value, 1)


def test_lagrange_coefficients(toy):
    assert lagrange_coefficient(toy, 1, [1, 2]) == 2
    assert lagrange_coefficient(toy, 2, [1, 2]) == 10
    assert lagrange_coefficient(toy, 3, [3]) == 1


def _combined_shares(params, privs):
    return {
        j: combine_key_shares(params, [compute_trustee_polynomial(params, p, j) for p in privs])
        for j in range(1, params.trustees + 1)
    }


def test_any_quorum_decrypts(params, election):
    shares = _combined_shares(params, election["privs"])
    msg = encrypt_contest(params, election["joint_key"], [1, 1, 0, 1], rand_qs(params, 4))
    for quorum in combinations(range(1, params.trustees + 1), params.threshold):
        partials = {j: pow(msg.public_key, shares[j], params.p) for j in quorum}
        assert threshold_decrypt(params, partials, msg) == g_pow(params, 3)
    everyone = {j: pow(msg.public_key, s, params.p) for j, s in shares.items()}
    assert threshold_decrypt(params, everyone, msg) == g_pow(params, 3)


def test_threshold_decrypt_rejects_small_or_bad_quorum(params, election):
    shares = _combined_shares(params, election["privs"])
    msg = encrypt_selection(params, election["joint_key"], 1)
    with pytest.raises(StructuralError):
        threshold_decrypt(params, {1: pow(msg.public_key, shares[1], params.p)}, msg)
    with pytest.raises(StructuralError):
        threshold_decrypt(params, {1: 1, params.trustees + 1: 1}, msg)


def test_tally_value(params):
    assert tally_value(params, g_pow(params, 5), 10) == 5
    assert tally_value(params, g_pow(params, 0), 10) == 0
    assert tally_value(params, g_pow(params, 37), 100) == 37
    assert tally_value(params, g_pow(params, 11), 10) is None
    assert tally_value(params, g_pow(params, 1000), 999) is None


def test_discrete_log_strategies_agree(params):
    for k in (0, 1, 17, 63, 64):
        value = g_pow(params, k)
        assert discrete_log_small(params, value, 64) == k
        assert discrete_log_bsgs(params, value, 64) == k
