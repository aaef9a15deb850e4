"""Fiat-Shamir hash chain.

The base hash binds the election parameters; every challenge is derived by
extending a prior digest with fixed-width encodings of group elements. The
hash primitive is injected so it can be swapped (or mocked) by callers.
"""

import hashlib
import logging
from typing import Callable, Sequence

from .config import ElectionParams
from .encoding import encode_int
from .errors import ConfigurationError, StructuralError

logger = logging.getLogger(__name__)

# SHA-2 family message-length limit
_DEFAULT_CAPACITY_BITS = 2**64 - 1


class HashChain:
    """Domain-separated challenge derivation for one set of election parameters

    Args
    - params: validated election parameters
    - hash_fn: hashlib-style constructor (``hash_fn()`` returns an object with
      ``update``/``digest`` and ``digest_size``); defaults to SHA-256
    - capacity_bits: largest input, in bits, the primitive accepts
    """

    def __init__(
        self,
        params: ElectionParams,
        hash_fn: Callable = hashlib.sha256,
        capacity_bits: int = _DEFAULT_CAPACITY_BITS,
    ):
        digest_bits = hash_fn().digest_size * 8
        if digest_bits != params.hash_bits:
            raise ConfigurationError(
                f"hash primitive yields {digest_bits} bits, parameters expect {params.hash_bits}"
            )
        self.params = params
        self.hash_fn = hash_fn
        self.capacity_bits = capacity_bits

    def _digest(self, payload: bytes) -> bytes:
        if len(payload) * 8 > self.capacity_bits:
            raise StructuralError("hash input exceeds the primitive's capacity")
        h = self.hash_fn()
        h.update(payload)
        return h.digest()

    def encode_elements(self, elements: Sequence[int]) -> bytes:
        bits = self.params.elem_bits
        return b"".join(encode_int(e, bits) for e in elements)

    def base_hash(self, data: bytes = b"") -> bytes:
        """H(p || q || g || trustees || threshold || data)"""

        params = self.params
        header = (
            self.encode_elements([params.p, params.q, params.g])
            + encode_int(params.trustees, 8)
            + encode_int(params.threshold, 8)
        )
        return self._digest(header + bytes(data))

    def extended_hash(self, prior: bytes, elements: Sequence[int]) -> bytes:
        """H(prior || e_1 || ... || e_n), each element elem_bits wide."""

        if len(prior) * 8 != self.params.hash_bits:
            raise StructuralError(
                f"prior hash must be {self.params.hash_bits} bits, got {len(prior) * 8}"
            )
        return self._digest(bytes(prior) + self.encode_elements(elements))

    def extended_hash_z(self, prior: bytes, elements: Sequence[int]) -> int:
        """extended_hash reduced into ZQ, for use as a challenge."""

        digest = self.extended_hash(prior, elements)
        return int.from_bytes(digest, "big") % self.params.q

    def election_hash(self, joint_key: int) -> bytes:
        """Prior hash binding proofs to one election key."""

        return self.extended_hash(self.base_hash(), [joint_key])
