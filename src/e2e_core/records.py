"""Immutable records exchanged between trustees, voters and verifiers.

Every record is a flat dataclass of group elements (ZP), scalars (ZQ) or
nested records, so it can be serialized field by field (see `encoding`).
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class EncryptedMessage:
    """ElGamal ciphertext

    Attributes
    - public_key: g^r, the ephemeral key (alpha)
    - ciphertext: m * K^r (beta)
    """

    public_key: int
    ciphertext: int


@dataclass(frozen=True)
class SchnorrProof:
    commitment: int
    challenge: int
    response: int


@dataclass(frozen=True)
class CPProof:
    """Chaum-Pedersen proof; the commitment is the pair (a, b)."""

    commitment: EncryptedMessage
    challenge: int
    response: int


@dataclass(frozen=True)
class CPProofDisj:
    """Disjunctive proof that a ciphertext encrypts 0 (left) or 1 (right)."""

    left: CPProof
    right: CPProof


@dataclass(frozen=True)
class IndividualPrivateKey:
    """A trustee's secret and its polynomial coefficients (coefficients[0] == secret)."""

    secret: int
    coefficients: Tuple[int, ...]


@dataclass(frozen=True)
class PublicKeyCommitments:
    """g^a_i for every coefficient a_i, with Schnorr proofs sharing one challenge."""

    public_keys: Tuple[int, ...]
    proofs: Tuple[SchnorrProof, ...]
    challenge: int


@dataclass(frozen=True)
class EncryptedPrivateKeyShare:
    """P(recipient) masked under the recipient's public key

    Attributes
    - recipient: index of the receiving trustee (1-based)
    - public_key: g^r for the sender's fresh nonce r
    - masked_share: P(recipient) + H(recipient, g^r, K_recipient^r) mod q
    """

    recipient: int
    public_key: int
    masked_share: int


@dataclass(frozen=True)
class EncryptedContest:
    """An encrypted contest as posted by a voter

    Attributes
    - selections: one ciphertext per selection, in contest order
    - proofs: one disjunctive 0/1 proof per selection
    - aggregate_proof: CP proof that the product of `selections` encrypts the
      declared number of selections
    """

    selections: Tuple[EncryptedMessage, ...]
    proofs: Tuple[CPProofDisj, ...]
    aggregate_proof: CPProof
