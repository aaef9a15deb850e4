"""Partial decryption by trustees, recombination and tally extraction."""

import logging
from math import ceil, isqrt
from typing import Mapping, Optional, Sequence

from .config import ElectionParams
from .errors import StructuralError
from .group import g_pow, inv_p, mul_p, mul_q, pow_p, prod_p
from .records import EncryptedMessage, IndividualPrivateKey

logger = logging.getLogger(__name__)


def trustee_decrypt(params: ElectionParams, priv: IndividualPrivateKey, msg: EncryptedMessage) -> int:
    """A trustee's partial decryption alpha^s."""

    return pow_p(params, msg.public_key, priv.secret)


def full_decrypt(params: ElectionParams, shares: Sequence[int], msg: EncryptedMessage) -> int:
    """ciphertext * (prod shares)^-1, with one share from every trustee."""

    if len(shares) != params.trustees:
        raise StructuralError(
            f"full decryption needs {params.trustees} partial decryptions, got {len(shares)}"
        )
    return mul_p(params, msg.ciphertext, inv_p(params, prod_p(params, shares)))


def check_tally(params: ElectionParams, value: int, tally: int) -> bool:
    """True when a decrypted value equals g^tally."""

    return value == g_pow(params, tally)


## --- threshold recombination -----------------------------------------------


def lagrange_coefficient(params: ElectionParams, index: int, indices: Sequence[int]) -> int:
    """w_i = prod_{j != i} j / (j - i) mod q, interpolating at x = 0."""

    num, den = 1, 1
    for j in indices:
        if j == index:
            continue
        num = mul_q(params, num, j)
        den = mul_q(params, den, j - index)
    return mul_q(params, num, pow(den, -1, params.q))


def threshold_decrypt(
    params: ElectionParams, partials: Mapping[int, int], msg: EncryptedMessage
) -> int:
    """Decrypt from any `threshold` trustees' partial decryptions

    `partials` maps a trustee index (1-based) to alpha^x_i, where x_i is that
    trustee's combined key share. Lagrange interpolation in the exponent gives
    alpha^(sum of all secrets).
    """

    indices = sorted(partials)
    if len(indices) < params.threshold:
        raise StructuralError(
            f"threshold decryption needs {params.threshold} partial decryptions, got {len(indices)}"
        )
    for i in indices:
        if not 1 <= i <= params.trustees:
            raise StructuralError(f"trustee index {i} outside [1, {params.trustees}]")

    combined = 1
    for i in indices:
        w = lagrange_coefficient(params, i, indices)
        combined = mul_p(params, combined, pow_p(params, partials[i], w))
    logger.debug(f"recombined partial decryptions from trustees {indices}")
    return mul_p(params, msg.ciphertext, inv_p(params, combined))


## --- tally extraction --------------------------------------------------------


def discrete_log_small(params: ElectionParams, value: int, max_k: int) -> Optional[int]:
    """Brute-force discrete log for small ranges (0 to max_k)

    Intended for tallying counts up to the number of voters.
    Returns k if g^k == value (mod p), else None
    """

    cur = 1
    for k in range(max_k + 1):
        if cur == value:
            return k
        cur = (cur * params.g) % params.p
    return None


def discrete_log_bsgs(params: ElectionParams, value: int, max_k: int) -> Optional[int]:
    """Baby-step giant-step discrete log: find k <= max_k with g^k == value (mod p)."""

    m = isqrt(max_k) + 1

    baby = {}
    cur = 1
    for j in range(m):
        baby.setdefault(cur, j)
        cur = (cur * params.g) % params.p

    # factor = g^{-m}
    factor = pow(pow(params.g, m, params.p), -1, params.p)

    gamma = value
    for i in range(ceil(max_k / m) + 1):
        if gamma in baby:
            k = i * m + baby[gamma]
            return k if k <= max_k else None
        gamma = (gamma * factor) % params.p
    return None


def tally_value(params: ElectionParams, value: int, max_k: int) -> Optional[int]:
    """Recover t from g^t for 0 <= t <= max_k, choosing the search by range."""

    if max_k <= 64:
        return discrete_log_small(params, value, max_k)
    return discrete_log_bsgs(params, value, max_k)
