"""Non-interactive zero-knowledge proofs over ElGamal ciphertexts.

- Chaum-Pedersen (CP): a ciphertext encrypts g^m under key K
- disjunctive CP: a ciphertext encrypts g^0 or g^1, without saying which
- aggregate: the product of a contest's ciphertexts encrypts its declared count
- trustee decryption: M = alpha^s is consistent with the trustee key g^s

All challenges come from the hash chain, so verifiers recompute them
independently. Every verifier returns a `VerificationResult`.
"""

import logging
from typing import Optional, Sequence, Tuple

from .errors import Failure, StructuralError, VerificationResult
from .encryption import combine_messages, encrypt_contest, encrypt_selection
from .group import (
    add_q,
    g_pow,
    in_zq,
    in_zrp,
    mul_p,
    mul_q,
    pow_p,
    rand_q,
    rand_qs,
    sub_q,
)
from .hashing import HashChain
from .records import CPProof, CPProofDisj, EncryptedContest, EncryptedMessage

logger = logging.getLogger(__name__)


def _verify_dleq(
    params,
    proof: CPProof,
    base_a: int,
    value_a: int,
    base_b: int,
    value_b: int,
    shift: int = 1,
) -> VerificationResult:
    """Equality of discrete logs shared by every CP-shaped proof

    Checks base_a^v == a * value_a^c and shift * base_b^v == b * value_b^c,
    after checking that a, b, value_a and value_b are subgroup elements.
    """

    a = proof.commitment.public_key
    b = proof.commitment.ciphertext
    for name, x in (("a", a), ("b", b), ("alpha", value_a), ("beta", value_b)):
        if not in_zrp(params, x):
            logger.debug(f"proof rejected: {name} is outside the subgroup")
            return VerificationResult.fail(Failure.SUBGROUP_MEMBERSHIP, name)

    c, v = proof.challenge, proof.response
    if not in_zq(params, c) or not in_zq(params, v):
        logger.debug("proof rejected: challenge or response outside [0, q)")
        return VerificationResult.fail(Failure.STRUCTURAL, "scalar out of range")
    if pow_p(params, base_a, v) != mul_p(params, a, pow_p(params, value_a, c)):
        logger.debug("proof rejected: first CP equation does not hold")
        return VerificationResult.fail(Failure.EQUATION_MISMATCH, "first equation")
    lhs = mul_p(params, shift, pow_p(params, base_b, v))
    if lhs != mul_p(params, b, pow_p(params, value_b, c)):
        logger.debug("proof rejected: second CP equation does not hold")
        return VerificationResult.fail(Failure.EQUATION_MISMATCH, "second equation")
    return VerificationResult.success()


def verify_cp_proof(
    params, m: int, proof: CPProof, key: int, msg: EncryptedMessage
) -> VerificationResult:
    """Check g^v == a * alpha^c and g^m * K^v == b * beta^c

    `m` is the plaintext exponent already multiplied by the challenge, i.e.
    c * t for a claimed plaintext g^t.
    """

    return _verify_dleq(
        params,
        proof,
        base_a=params.g,
        value_a=msg.public_key,
        base_b=key,
        value_b=msg.ciphertext,
        shift=g_pow(params, m),
    )


## --- disjunctive (ballot well-formedness) --------------------------------


def _disj_challenge(chain: HashChain, prior: bytes, msg: EncryptedMessage, left, right) -> int:
    return chain.extended_hash_z(
        prior,
        [
            msg.public_key,
            msg.ciphertext,
            left.public_key,
            left.ciphertext,
            right.public_key,
            right.ciphertext,
        ],
    )


def encrypt_with_proof(
    chain: HashChain,
    prior: bytes,
    key: int,
    selection: int,
    nonce: Optional[int] = None,
    c_old: Optional[int] = None,
    v_old: Optional[int] = None,
    u: Optional[int] = None,
) -> Tuple[EncryptedMessage, CPProofDisj]:
    """Encrypt a 0/1 selection and prove it is 0 or 1

    The branch for the other value is simulated from (c_old, v_old) first;
    the real branch's challenge is then the hash minus c_old, so the prover
    cannot choose both challenges. Random values are drawn when not supplied.
    """

    params = chain.params
    if nonce is None:
        nonce = rand_q(params)
    c_old = rand_q(params) if c_old is None else c_old
    v_old = rand_q(params) if v_old is None else v_old
    u = rand_q(params) if u is None else u

    msg = encrypt_selection(params, key, selection, nonce)
    alpha, beta = msg.public_key, msg.ciphertext

    # simulated branch: solve both verification equations for (a, b)
    fake = 1 - selection
    fake_commitment = EncryptedMessage(
        public_key=mul_p(params, g_pow(params, v_old), pow_p(params, alpha, -c_old)),
        ciphertext=mul_p(
            params,
            mul_p(params, g_pow(params, fake * c_old), pow_p(params, key, v_old)),
            pow_p(params, beta, -c_old),
        ),
    )
    real_commitment = EncryptedMessage(
        public_key=g_pow(params, u), ciphertext=pow_p(params, key, u)
    )

    if selection == 0:
        left_commitment, right_commitment = real_commitment, fake_commitment
    else:
        left_commitment, right_commitment = fake_commitment, real_commitment

    total = _disj_challenge(chain, prior, msg, left_commitment, right_commitment)
    c_new = sub_q(params, total, c_old)
    v_new = add_q(params, u, mul_q(params, c_new, nonce))

    real = CPProof(commitment=real_commitment, challenge=c_new, response=v_new)
    simulated = CPProof(commitment=fake_commitment, challenge=c_old, response=v_old)
    if selection == 0:
        proof = CPProofDisj(left=real, right=simulated)
    else:
        proof = CPProofDisj(left=simulated, right=real)
    return msg, proof


def verify_cp_proof_disj(
    chain: HashChain, prior: bytes, key: int, msg: EncryptedMessage, proof: CPProofDisj
) -> VerificationResult:
    """Left branch against plaintext 0, right against 1, challenges summing to H."""

    params = chain.params
    if not in_zrp(params, msg.public_key) or not in_zrp(params, msg.ciphertext):
        return VerificationResult.fail(Failure.SUBGROUP_MEMBERSHIP, "ciphertext")
    for branch in (proof.left, proof.right):
        if not in_zq(params, branch.challenge) or not in_zq(params, branch.response):
            return VerificationResult.fail(Failure.STRUCTURAL, "scalar out of range")
    try:
        total = _disj_challenge(
            chain, prior, msg, proof.left.commitment, proof.right.commitment
        )
    except StructuralError as e:
        return VerificationResult.fail(Failure.STRUCTURAL, str(e))
    if add_q(params, proof.left.challenge, proof.right.challenge) != total:
        logger.debug("selection proof rejected: branch challenges do not sum to the hash")
        return VerificationResult.fail(Failure.CHALLENGE_MISMATCH, "c0 + c1 != H")

    left = verify_cp_proof(params, 0, proof.left, key, msg)
    if not left:
        return left
    return verify_cp_proof(params, proof.right.challenge, proof.right, key, msg)


## --- aggregate (selection count) -----------------------------------------


def _cp_challenge(chain: HashChain, prior: bytes, msg: EncryptedMessage, commitment) -> int:
    return chain.extended_hash_z(
        prior,
        [msg.public_key, msg.ciphertext, commitment.public_key, commitment.ciphertext],
    )


def aggregate_encryption_proof(
    chain: HashChain,
    prior: bytes,
    key: int,
    contest: Sequence[int],
    nonces: Sequence[int],
    u: Optional[int] = None,
) -> Tuple[EncryptedMessage, CPProof]:
    """Prove the combined contest ciphertext encrypts g^sum(contest)

    Returns (combined ciphertext, proof); the witness is the summed nonce.
    """

    params = chain.params
    msg = encrypt_contest(params, key, contest, nonces)
    if u is None:
        u = rand_q(params)
    commitment = EncryptedMessage(public_key=g_pow(params, u), ciphertext=pow_p(params, key, u))
    c = _cp_challenge(chain, prior, msg, commitment)
    v = add_q(params, u, mul_q(params, c, add_q(params, *nonces)))
    return msg, CPProof(commitment=commitment, challenge=c, response=v)


def verify_aggregate_encryption_proof(
    chain: HashChain,
    prior: bytes,
    key: int,
    msg: EncryptedMessage,
    selections_count: int,
    proof: CPProof,
) -> VerificationResult:
    params = chain.params
    try:
        expected = _cp_challenge(chain, prior, msg, proof.commitment)
    except StructuralError as e:
        return VerificationResult.fail(Failure.STRUCTURAL, str(e))
    if proof.challenge != expected:
        logger.debug("aggregate proof rejected: challenge mismatch")
        return VerificationResult.fail(Failure.CHALLENGE_MISMATCH, "aggregate challenge")
    return verify_cp_proof(
        params, mul_q(params, selections_count, proof.challenge), proof, key, msg
    )


## --- trustee partial decryption ------------------------------------------


def _decrypt_challenge(chain, prior, msg: EncryptedMessage, commitment, partial: int) -> int:
    return chain.extended_hash_z(
        prior,
        [
            msg.public_key,
            msg.ciphertext,
            commitment.public_key,
            commitment.ciphertext,
            partial,
        ],
    )


def trustee_decrypt_proof(
    chain: HashChain, prior: bytes, secret: int, msg: EncryptedMessage, u: Optional[int] = None
) -> Tuple[int, CPProof]:
    """Partial decryption M = alpha^s with a proof that log_g K == log_alpha M

    `secret` is the trustee's secret, or its combined key share when
    decrypting by threshold.
    Returns (M, proof).
    """

    params = chain.params
    if u is None:
        u = rand_q(params)
    alpha = msg.public_key
    partial = pow_p(params, alpha, secret)
    commitment = EncryptedMessage(public_key=g_pow(params, u), ciphertext=pow_p(params, alpha, u))
    c = _decrypt_challenge(chain, prior, msg, commitment, partial)
    v = add_q(params, u, mul_q(params, c, secret))
    return partial, CPProof(commitment=commitment, challenge=c, response=v)


def check_trustee_decrypt_proof(
    chain: HashChain,
    prior: bytes,
    key: int,
    msg: EncryptedMessage,
    partial: int,
    proof: CPProof,
) -> VerificationResult:
    """Check g^v == a * K^c and alpha^v == b * M^c with a recomputed c."""

    params = chain.params
    if not in_zrp(params, key) or not in_zrp(params, msg.public_key):
        return VerificationResult.fail(Failure.SUBGROUP_MEMBERSHIP, "key or alpha")
    try:
        expected = _decrypt_challenge(chain, prior, msg, proof.commitment, partial)
    except StructuralError as e:
        return VerificationResult.fail(Failure.STRUCTURAL, str(e))
    if proof.challenge != expected:
        logger.debug("decryption proof rejected: challenge mismatch")
        return VerificationResult.fail(Failure.CHALLENGE_MISMATCH, "decryption challenge")
    return _verify_dleq(
        params,
        proof,
        base_a=params.g,
        value_a=key,
        base_b=msg.public_key,
        value_b=partial,
    )


## --- whole contests ----------------------------------------------------------


def encrypt_contest_with_proofs(
    chain: HashChain,
    prior: bytes,
    key: int,
    contest: Sequence[int],
    nonces: Optional[Sequence[int]] = None,
) -> EncryptedContest:
    """Encrypt every selection with its 0/1 proof plus the aggregate count proof."""

    params = chain.params
    if nonces is None:
        nonces = rand_qs(params, len(contest))
    if len(nonces) != len(contest):
        raise StructuralError(f"contest has {len(contest)} selections but {len(nonces)} nonces")

    selections, proofs = [], []
    for selection, nonce in zip(contest, nonces):
        msg, proof = encrypt_with_proof(chain, prior, key, selection, nonce)
        selections.append(msg)
        proofs.append(proof)
    _, aggregate = aggregate_encryption_proof(chain, prior, key, contest, nonces)
    return EncryptedContest(
        selections=tuple(selections), proofs=tuple(proofs), aggregate_proof=aggregate
    )


def verify_encrypted_contest(
    chain: HashChain,
    prior: bytes,
    key: int,
    contest: EncryptedContest,
    selections_count: int,
) -> VerificationResult:
    """Every selection is 0/1 and, together, they encrypt `selections_count`."""

    if len(contest.selections) != len(contest.proofs) or not contest.selections:
        return VerificationResult.fail(Failure.STRUCTURAL, "selections/proofs mismatch")
    for i, (msg, proof) in enumerate(zip(contest.selections, contest.proofs)):
        result = verify_cp_proof_disj(chain, prior, key, msg, proof)
        if not result:
            logger.debug(f"contest rejected at selection {i}: {result.failure}")
            return result

    combined = combine_messages(chain.params, contest.selections)
    return verify_aggregate_encryption_proof(
        chain, prior, key, combined, selections_count, contest.aggregate_proof
    )
