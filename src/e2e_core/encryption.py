"""ElGamal encryption of group elements, selections and whole contests.

Selections are exponent-encoded (g^0 or g^1) so that multiplying ciphertexts
adds the encoded counts.
"""

from typing import Iterable, List, Optional, Sequence

from .config import ElectionParams
from .errors import StructuralError
from .group import add_q, g_pow, mul_p, pow_p, prod_p, rand_q
from .records import EncryptedMessage


def _check_selection(selection: int) -> int:
    if selection not in (0, 1):
        raise StructuralError("A selection must be 0 or 1 (bit encoding).")
    return int(selection)


def encrypt(
    params: ElectionParams, key: int, message: int, nonce: Optional[int] = None
) -> EncryptedMessage:
    """Encrypt a group element under `key`

    Returns (g^nonce, message * key^nonce). The nonce is sampled fresh when not
    supplied; callers that need it later for proofs must pass it in.
    """

    if nonce is None:
        nonce = rand_q(params)
    return EncryptedMessage(
        public_key=g_pow(params, nonce),
        ciphertext=mul_p(params, message, pow_p(params, key, nonce)),
    )


def encrypt_selection(
    params: ElectionParams, key: int, selection: int, nonce: Optional[int] = None
) -> EncryptedMessage:
    selection = _check_selection(selection)
    return encrypt(params, key, g_pow(params, selection), nonce)


def encrypt_multiple(
    params: ElectionParams, key: int, messages: Sequence[int], nonces: Sequence[int]
) -> EncryptedMessage:
    """Encryption of the product of `messages` under the summed nonce

    Equal to multiplying the individual encryptions, with two exponentiations
    instead of 2n.
    """

    if len(messages) != len(nonces):
        raise StructuralError(
            f"{len(messages)} messages but {len(nonces)} nonces"
        )
    return encrypt(params, key, prod_p(params, messages), add_q(params, *nonces))


def encrypt_contest(
    params: ElectionParams, key: int, contest: Sequence[int], nonces: Sequence[int]
) -> EncryptedMessage:
    """Encrypt the selection count of a contest under the summed nonce."""

    if len(contest) != len(nonces):
        raise StructuralError(
            f"contest has {len(contest)} selections but {len(nonces)} nonces"
        )
    count = sum(_check_selection(s) for s in contest)
    return encrypt(params, key, g_pow(params, count), add_q(params, *nonces))


def decrypt(params: ElectionParams, secret: int, msg: EncryptedMessage) -> int:
    """ciphertext * public_key^(-secret); only meaningful for the matching key."""

    return mul_p(params, msg.ciphertext, pow_p(params, msg.public_key, -secret))


## --- homomorphic aggregation ---------------------------------------------


def combine_messages(
    params: ElectionParams, messages: Iterable[EncryptedMessage]
) -> EncryptedMessage:
    """Enc(m1) * Enc(m2) * ... = Enc(m1 + m2 + ...) in the exponent."""

    messages = list(messages)
    return EncryptedMessage(
        public_key=prod_p(params, (m.public_key for m in messages)),
        ciphertext=prod_p(params, (m.ciphertext for m in messages)),
    )


def accumulate_contests(
    params: ElectionParams, ballots: Sequence[Sequence[EncryptedMessage]]
) -> List[EncryptedMessage]:
    """Multiply ciphertexts position-wise across ballots of the same contest

    Returns one aggregated ciphertext per selection position. All ballots must
    have the same number of selections.
    """

    if not ballots:
        return []
    width = len(ballots[0])
    for b in ballots:
        if len(b) != width:
            raise StructuralError(
                f"ballot has {len(b)} selections, expected {width}"
            )
    return [combine_messages(params, (b[i] for b in ballots)) for i in range(width)]
