"""Threshold key generation.

Each trustee holds a secret s and a polynomial P(x) = s + a_1 x + ... of
degree threshold-1. Trustees publish g^a_i for every coefficient together
with Schnorr proofs of possession, hand P(j) to trustee j, and the election
key is the product of all trustees' g^s.
"""

import logging
from typing import Optional, Sequence

from .config import ElectionParams
from .errors import Failure, StructuralError, VerificationResult
from .group import add_q, g_pow, in_zq, in_zrp, mul_p, mul_q, pow_p, prod_p, rand_q, rand_qs
from .hashing import HashChain
from .records import (
    EncryptedPrivateKeyShare,
    IndividualPrivateKey,
    PublicKeyCommitments,
    SchnorrProof,
)

logger = logging.getLogger(__name__)


def form_public_key(params: ElectionParams, secret: int) -> int:
    return g_pow(params, secret)


def generate_key_pair(
    params: ElectionParams, secret: Optional[int] = None, coefficients: Optional[Sequence[int]] = None
):
    """Generate a trustee key pair

    Args
    - secret: s in ZQ; sampled when None
    - coefficients: the threshold-1 higher coefficients; sampled when None

    Returns: (public_key, IndividualPrivateKey) where public_key = g^s
    """

    if secret is None:
        secret = rand_q(params)
    if coefficients is None:
        coefficients = rand_qs(params, params.threshold - 1)
    if len(coefficients) != params.threshold - 1:
        raise StructuralError(
            f"expected {params.threshold - 1} coefficients, got {len(coefficients)}"
        )
    secret %= params.q
    priv = IndividualPrivateKey(
        secret=secret,
        coefficients=(secret,) + tuple(c % params.q for c in coefficients),
    )
    return form_public_key(params, secret), priv


def _check_private_key(params: ElectionParams, priv: IndividualPrivateKey) -> None:
    if len(priv.coefficients) != params.threshold:
        raise StructuralError(
            f"private key has {len(priv.coefficients)} coefficients, threshold is {params.threshold}"
        )
    if priv.coefficients[0] != priv.secret:
        raise StructuralError("coefficient 0 must equal the secret")


def compute_trustee_polynomial(params: ElectionParams, priv: IndividualPrivateKey, x: int) -> int:
    """P(x) = sum(coefficients[j] * x^j) mod q, evaluated Horner style."""

    _check_private_key(params, priv)
    acc = 0
    for c in reversed(priv.coefficients):
        acc = (acc * x + c) % params.q
    return acc


def form_aggregate_key(params: ElectionParams, keys: Sequence[int]) -> int:
    """Product of every trustee's public key; needs exactly `trustees` keys."""

    if len(keys) != params.trustees:
        raise StructuralError(
            f"aggregate key needs {params.trustees} public keys, got {len(keys)}"
        )
    for k in keys:
        if not in_zrp(params, k):
            raise StructuralError("public key is not a subgroup element")
    return prod_p(params, keys)


## --- commitments -----------------------------------------------------------


def publish_commitments(
    chain: HashChain,
    prior: bytes,
    priv: IndividualPrivateKey,
    nonces: Optional[Sequence[int]] = None,
) -> PublicKeyCommitments:
    """Publish g^a_i for each coefficient with Schnorr proofs of knowledge

    All proofs share the challenge c = H(prior, K_0..K_n, h_0..h_n) where
    h_i = g^nonce_i; the response for coefficient i is nonce_i + c * a_i.
    """

    params = chain.params
    _check_private_key(params, priv)
    if nonces is None:
        nonces = rand_qs(params, params.threshold)
    if len(nonces) != params.threshold:
        raise StructuralError(f"expected {params.threshold} nonces, got {len(nonces)}")

    public_keys = [g_pow(params, a) for a in priv.coefficients]
    commitments = [g_pow(params, n) for n in nonces]
    c = chain.extended_hash_z(prior, public_keys + commitments)
    proofs = tuple(
        SchnorrProof(commitment=h, challenge=c, response=add_q(params, n, mul_q(params, c, a)))
        for h, n, a in zip(commitments, nonces, priv.coefficients)
    )
    return PublicKeyCommitments(public_keys=tuple(public_keys), proofs=proofs, challenge=c)


def verify_public_key_commitments(
    chain: HashChain, prior: bytes, comms: PublicKeyCommitments
) -> VerificationResult:
    """Check every Schnorr equation g^u == h * K^c and the shared challenge."""

    params = chain.params
    if len(comms.public_keys) != params.threshold or len(comms.proofs) != params.threshold:
        return VerificationResult.fail(
            Failure.STRUCTURAL,
            f"expected {params.threshold} commitments, got {len(comms.public_keys)}/{len(comms.proofs)}",
        )
    for value in list(comms.public_keys) + [p.commitment for p in comms.proofs]:
        if not in_zrp(params, value):
            logger.debug("commitment rejected: element outside the subgroup")
            return VerificationResult.fail(Failure.SUBGROUP_MEMBERSHIP, "commitment element")
    scalars = [comms.challenge] + [s for p in comms.proofs for s in (p.challenge, p.response)]
    if not all(in_zq(params, s) for s in scalars):
        return VerificationResult.fail(Failure.STRUCTURAL, "scalar out of range")

    expected = chain.extended_hash_z(
        prior, list(comms.public_keys) + [p.commitment for p in comms.proofs]
    )
    if comms.challenge != expected or any(p.challenge != expected for p in comms.proofs):
        logger.debug("commitment rejected: stale or forged challenge")
        return VerificationResult.fail(Failure.CHALLENGE_MISMATCH, "commitment challenge")

    for i, (k, proof) in enumerate(zip(comms.public_keys, comms.proofs)):
        lhs = g_pow(params, proof.response)
        rhs = mul_p(params, proof.commitment, pow_p(params, k, proof.challenge))
        if lhs != rhs:
            logger.debug(f"commitment rejected: Schnorr equation {i} does not hold")
            return VerificationResult.fail(Failure.EQUATION_MISMATCH, f"coefficient {i}")
    return VerificationResult.success()


## --- key shares ------------------------------------------------------------


def _check_index(params: ElectionParams, index: int) -> None:
    if not 1 <= index <= params.trustees:
        raise StructuralError(f"trustee index {index} outside [1, {params.trustees}]")


def _share_pad(chain: HashChain, prior: bytes, recipient: int, public_key: int, shared: int) -> int:
    return chain.extended_hash_z(prior, [recipient, public_key, shared])


def generate_key_share(
    chain: HashChain,
    prior: bytes,
    priv: IndividualPrivateKey,
    recipient: int,
    recipient_key: int,
    nonce: Optional[int] = None,
) -> EncryptedPrivateKeyShare:
    """Evaluate P(recipient) and mask it for the recipient's public key

    The mask is H(recipient, g^r, K^r) reduced into ZQ; only the holder of the
    recipient's secret can recompute K^r = (g^r)^s.
    """

    params = chain.params
    _check_index(params, recipient)
    if nonce is None:
        nonce = rand_q(params)
    value = compute_trustee_polynomial(params, priv, recipient)
    public_key = g_pow(params, nonce)
    shared = pow_p(params, recipient_key, nonce)
    pad = _share_pad(chain, prior, recipient, public_key, shared)
    return EncryptedPrivateKeyShare(
        recipient=recipient,
        public_key=public_key,
        masked_share=add_q(params, value, pad),
    )


def decrypt_key_share(
    chain: HashChain, prior: bytes, secret: int, share: EncryptedPrivateKeyShare
) -> int:
    params = chain.params
    _check_index(params, share.recipient)
    shared = pow_p(params, share.public_key, secret)
    pad = _share_pad(chain, prior, share.recipient, share.public_key, shared)
    return (share.masked_share - pad) % params.q


def verify_key_share(
    params: ElectionParams, comms: PublicKeyCommitments, recipient: int, value: int
) -> VerificationResult:
    """Check g^P(j) == prod(K_i^(j^i)) against the sender's commitments."""

    if len(comms.public_keys) != params.threshold:
        return VerificationResult.fail(Failure.STRUCTURAL, "commitment count")
    expected = share_public_key(params, [comms], recipient)
    if g_pow(params, value) != expected:
        logger.debug(f"key share for trustee {recipient} does not match commitments")
        return VerificationResult.fail(Failure.EQUATION_MISMATCH, f"share for {recipient}")
    return VerificationResult.success()


def combine_key_shares(params: ElectionParams, values: Sequence[int]) -> int:
    """A trustee's share of the joint secret: the sum of P_l(j) over all senders."""

    if len(values) != params.trustees:
        raise StructuralError(f"expected {params.trustees} shares, got {len(values)}")
    return add_q(params, *values)


def share_public_key(
    params: ElectionParams, commitments: Sequence[PublicKeyCommitments], index: int
) -> int:
    """g^(sum_l P_l(index)) computed only from published commitments."""

    _check_index(params, index)
    acc = 1
    for comms in commitments:
        for i, k in enumerate(comms.public_keys):
            acc = mul_p(params, acc, pow_p(params, k, pow(index, i, params.q)))
    return acc
