"""e2e_core - cryptographic core of an end-to-end verifiable election

Threshold ElGamal over a prime-order subgroup, Schnorr and Chaum-Pedersen
proofs bound by a Fiat-Shamir hash chain, and trustee decryption.
"""

from . import config, decryption, encoding, encryption, errors, group, hashing, keys, proofs, records
from .config import ElectionParams, load_config, params_512, params_default, save_config, toy_params
from .errors import ConfigurationError, Failure, StructuralError, VerificationResult
from .hashing import HashChain

__all__ = [
    "config",
    "decryption",
    "encoding",
    "encryption",
    "errors",
    "group",
    "hashing",
    "keys",
    "proofs",
    "records",
    "ElectionParams",
    "HashChain",
    "ConfigurationError",
    "StructuralError",
    "Failure",
    "VerificationResult",
    "load_config",
    "save_config",
    "toy_params",
    "params_512",
    "params_default",
]
