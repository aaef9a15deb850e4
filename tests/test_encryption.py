import secrets

import pytest

from e2e_core import StructuralError
from e2e_core.encryption import (
    accumulate_contests,
    combine_messages,
    decrypt,
    encrypt,
    encrypt_contest,
    encrypt_multiple,
    encrypt_selection,
)
from e2e_core.group import g_pow, rand_q, rand_qs
from e2e_core.keys import form_public_key
from e2e_core.records import EncryptedMessage


def test_worked_example(toy):
    key = form_public_key(toy, 3)
    assert key == 18
    msg = encrypt_selection(toy, key, 1, nonce=2)
    assert msg == EncryptedMessage(public_key=16, ciphertext=8)
    assert decrypt(toy, 3, msg) == 4 == g_pow(toy, 1)


@pytest.mark.parametrize("trial", range(10))
def test_decrypt_inverts_encrypt(params, trial):
    secret = rand_q(params)
    message = g_pow(params, rand_q(params))
    msg = encrypt(params, form_public_key(params, secret), message, rand_q(params))
    assert decrypt(params, secret, msg) == message


def test_decrypt_with_wrong_secret(params):
    secret = rand_q(params)
    msg = encrypt_selection(params, form_public_key(params, secret), 1)
    assert decrypt(params, secret + 1, msg) != params.g


@pytest.mark.parametrize("trial", range(8))
def test_contest_matches_product_of_selections(params, trial):
    key = form_public_key(params, rand_q(params))
    size = 1 + secrets.randbelow(6)
    contest = [secrets.randbelow(2) for _ in range(size)]
    nonces = rand_qs(params, size)
    expected = combine_messages(
        params, (encrypt_selection(params, key, s, r) for s, r in zip(contest, nonces))
    )
    assert encrypt_contest(params, key, contest, nonces) == expected


def test_encrypt_multiple_matches_product(params):
    key = form_public_key(params, rand_q(params))
    messages = [g_pow(params, rand_q(params)) for _ in range(4)]
    nonces = rand_qs(params, 4)
    expected = combine_messages(
        params, (encrypt(params, key, m, r) for m, r in zip(messages, nonces))
    )
    assert encrypt_multiple(params, key, messages, nonces) == expected


def test_selection_must_be_a_bit(params):
    with pytest.raises(StructuralError):
        encrypt_selection(params, params.g, 2)
    with pytest.raises(ValueError):
        encrypt_contest(params, params.g, [0, 3], [1, 2])


def test_length_mismatch_raises(params):
    with pytest.raises(StructuralError):
        encrypt_contest(params, params.g, [0, 1, 1], [1, 2])
    with pytest.raises(StructuralError):
        encrypt_multiple(params, params.g, [params.g], [])


def test_fresh_nonce_per_encryption(params):
    key = form_public_key(params, rand_q(params))
    assert encrypt_selection(params, key, 1) != encrypt_selection(params, key, 1)


def test_accumulate_contests_is_position_wise(params):
    secret = rand_q(params)
    key = form_public_key(params, secret)
    votes = [[1, 0, 0], [0, 0, 1], [1, 0, 0], [1, 0, 0]]
    ballots = [[encrypt_selection(params, key, s) for s in vote] for vote in votes]
    totals = accumulate_contests(params, ballots)
    assert [decrypt(params, secret, t) for t in totals] == [
        g_pow(params, 3),
        g_pow(params, 0),
        g_pow(params, 1),
    ]
    assert accumulate_contests(params, []) == []
    with pytest.raises(StructuralError):
        accumulate_contests(params, [ballots[0], ballots[1][:2]])
