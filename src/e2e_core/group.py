"""Arithmetic in ZP (the order-q subgroup mod p) and in ZQ (integers mod q).

All values are produced by reduction, so every function here is total for
well-formed parameters.
"""

import secrets
from typing import Iterable, List

from .config import ElectionParams


## --- ZP ------------------------------------------------------------------


def mul_p(params: ElectionParams, a: int, b: int) -> int:
    return (a * b) % params.p


def pow_p(params: ElectionParams, base: int, exp: int) -> int:
    """base^exp mod p; negative exponents go through the modular inverse."""

    return pow(base, exp, params.p)


def g_pow(params: ElectionParams, exp: int) -> int:
    return pow(params.g, exp % params.q, params.p)


def inv_p(params: ElectionParams, a: int) -> int:
    return pow(a, -1, params.p)


def prod_p(params: ElectionParams, elems: Iterable[int]) -> int:
    acc = 1
    for e in elems:
        acc = (acc * e) % params.p
    return acc


def in_zrp(params: ElectionParams, x: int) -> bool:
    """Subgroup membership: x in [1, p) and x^q == 1 (mod p)."""

    if not isinstance(x, int) or not 0 < x < params.p:
        return False
    return pow(x, params.q, params.p) == 1


## --- ZQ ------------------------------------------------------------------


def in_zq(params: ElectionParams, x: int) -> bool:
    """Canonical scalar: an int in [0, q)."""

    return isinstance(x, int) and not isinstance(x, bool) and 0 <= x < params.q


def add_q(params: ElectionParams, *values: int) -> int:
    return sum(values) % params.q


def sub_q(params: ElectionParams, a: int, b: int) -> int:
    return (a - b) % params.q


def mul_q(params: ElectionParams, a: int, b: int) -> int:
    return (a * b) % params.q


def rand_q(params: ElectionParams) -> int:
    """Return a fresh random scalar in [1 to q-1]

    Each call draws independently from `secrets`; there is no shared counter.
    """

    return secrets.randbelow(params.q - 1) + 1


def rand_qs(params: ElectionParams, n: int) -> List[int]:
    return [rand_q(params) for _ in range(n)]
