"""Election parameters: the group (p, q, g), trustee counts and bit widths.

Parameters are fixed once per election and validated eagerly; a bad value is a
`ConfigurationError` at construction time, never a runtime fault later on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

import yaml
from Crypto.Util import number

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

# RFC 3526 2048-bit MODP Group (Group 14) prime p
# Source for prime: https://datatracker.ietf.org/doc/html/rfc3526
_P_HEX = (
    "FFFFFFFFFFFFFFFFC90FDAA22168C234C4C6628B80DC1CD1"
    "29024E088A67CC74020BBEA63B139B22514A08798E3404DD"
    "EF9519B3CD3A431B302B0A6DF25F14374FE1356D6D51C245"
    "E485B576625E7EC6F44C42E9A637ED6B0BFF5CB6F406B7ED"
    "EE386BFB5A899FA5AE9F24117C4B1FE649286651ECE45B3D"
    "C2007CB8A163BF0598DA48361C55D39A69163FA8FD24CF5F"
    "83655D23DCA3AD961C62F356208552BB9ED529077096966D"
    "670C354E4ABC9804F1746C08CA18217C32905E462E36CE3B"
    "E39E772C180E86039B2783A2EC07A28FB5C55DF06F4C52C9"
    "DE2BCBF6955817183995497CEA956AE515D2261898FA0510"
    "15728E5A8AACAA68FFFFFFFFFFFFFFFF"
)

# 512-bit p with a 160-bit prime-order subgroup (DSA style)
_P512 = 0xA6886942C71169464B1B565DB7DBED36BF4767935C7775E1D2B96751ED8C9510517F5442E8BB75A406CF66DF1812109143F3364A4B69E353D23305BE24A897F9
_Q160 = 0xD324E6B0EF9964F0E29D5449532101EBB8582EA1
_G512 = 0x6151BA366F46C90AA1DF61E1CAB13B61CA8FBD8C1D6EEC140E3D15B391BEDB139B7DC5391B81395E3B5A808210910D0681A98378C2D42469195FA346A5943EEB

# trustee count and threshold travel as single bytes in the base hash
_MAX_TRUSTEES = 255

_YAML_KEYS = {
    "prime": "p",
    "exp_modulus": "q",
    "generator": "g",
    "trustees": "trustees",
    "threshold": "threshold",
    "elem_bits": "elem_bits",
    "hash_bits": "hash_bits",
}


@dataclass(frozen=True)
class ElectionParams:
    """Group and ceremony parameters

    Attributes
    - p: prime modulus of the group ZP
    - q: prime exponent modulus (order of g), the ring ZQ
    - g: generator of the order-q subgroup
    - trustees: number of trustees holding key material
    - threshold: polynomial degree + 1, the quorum size
    - elem_bits: fixed width of every group element on the wire
    - hash_bits: output width of the Fiat-Shamir hash
    """

    p: int
    q: int
    g: int
    trustees: int
    threshold: int
    elem_bits: int
    hash_bits: int = 256

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        for name in ("p", "q", "g", "trustees", "threshold", "elem_bits", "hash_bits"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise ConfigurationError(f"{name} must be an integer, got {value!r}")

        if not number.isPrime(self.p):
            raise ConfigurationError("p must be prime")
        if not number.isPrime(self.q):
            raise ConfigurationError("q must be prime")
        if not 1 < self.g < self.p:
            raise ConfigurationError("g must lie in (1, p)")
        if pow(self.g, self.q, self.p) != 1:
            raise ConfigurationError("g does not generate a subgroup of order q")

        if not 1 <= self.threshold <= self.trustees:
            raise ConfigurationError(
                f"threshold {self.threshold} must be in [1, trustees={self.trustees}]"
            )
        if self.trustees > _MAX_TRUSTEES:
            raise ConfigurationError(f"at most {_MAX_TRUSTEES} trustees are supported")
        if self.trustees >= self.q:
            # trustee indices must be distinct nonzero points mod q
            raise ConfigurationError(f"trustees {self.trustees} must be below q={self.q}")

        if self.elem_bits <= 0 or self.elem_bits % 8:
            raise ConfigurationError("elem_bits must be a positive multiple of 8")
        if self.elem_bits < max(self.p.bit_length(), self.q.bit_length()):
            raise ConfigurationError(
                f"elem_bits {self.elem_bits} too small for p ({self.p.bit_length()} bits)"
            )
        if self.hash_bits <= 0 or self.hash_bits % 8:
            raise ConfigurationError("hash_bits must be a positive multiple of 8")

    @property
    def elem_bytes(self) -> int:
        return self.elem_bits // 8

    def to_dict(self) -> Dict[str, Any]:
        return {key: getattr(self, attr) for key, attr in _YAML_KEYS.items()}


def toy_params() -> ElectionParams:
    """Tiny single-trustee group for worked examples (P=23, Q=11, g=4)."""

    return ElectionParams(p=23, q=11, g=4, trustees=1, threshold=1, elem_bits=8)


def params_512(trustees: int = 3, threshold: int = 2) -> ElectionParams:
    """512-bit group with a 160-bit subgroup; fast enough for tests and demos."""

    return ElectionParams(
        p=_P512, q=_Q160, g=_G512, trustees=trustees, threshold=threshold, elem_bits=512
    )


def params_default(trustees: int = 3, threshold: int = 2) -> ElectionParams:
    """Return RFC 3526 group-14 parameters

    The group is a safe prime; p = 7 (mod 8) so g=2 is a quadratic residue and
    generates the subgroup of order q = (p-1)//2.
    """

    p = int(_P_HEX, 16)
    q = (p - 1) // 2
    return ElectionParams(
        p=p, q=q, g=2, trustees=trustees, threshold=threshold, elem_bits=2048
    )


def _parse_int(key: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"{key} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value, 0)
        except ValueError:
            raise ConfigurationError(f"{key}: cannot parse {value!r} as an integer") from None
    raise ConfigurationError(f"{key} must be an integer")


def params_from_dict(data: Dict[str, Any]) -> ElectionParams:
    """Build parameters from the YAML/JSON key names (prime, exp_modulus, ...)."""

    if not isinstance(data, dict):
        raise ConfigurationError("configuration must be a mapping")
    kwargs = {}
    for key, attr in _YAML_KEYS.items():
        if key not in data:
            if key == "hash_bits":
                continue
            raise ConfigurationError(f"missing configuration key '{key}'")
        kwargs[attr] = _parse_int(key, data[key])
    return ElectionParams(**kwargs)


def load_config(config_path: Path) -> ElectionParams:
    """Load election parameters from a YAML file"""

    config_path = Path(config_path)
    try:
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"could not read {config_path}: {e}") from e

    params = params_from_dict(config_data or {})
    logger.info(
        f"Loaded election parameters from {config_path}: "
        f"{params.p.bit_length()}-bit p, {params.trustees} trustees, threshold {params.threshold}"
    )
    return params


def save_config(params: ElectionParams, config_path: Path) -> None:
    """Save election parameters to a YAML file (group values as hex strings)"""

    data = params.to_dict()
    for key in ("prime", "exp_modulus", "generator"):
        data[key] = hex(data[key])
    with open(config_path, "w") as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
