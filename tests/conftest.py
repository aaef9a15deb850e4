import os
import sys

import pytest


# Ensure repository src directory is on sys.path for tests
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
SRC = os.path.join(ROOT, "src")
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from e2e_core import HashChain, params_512, toy_params  # noqa: E402


@pytest.fixture(scope="session")
def toy():
    return toy_params()


@pytest.fixture(scope="session")
def params():
    # 512-bit group, three trustees, any two can decrypt
    return params_512(trustees=3, threshold=2)


@pytest.fixture(scope="session")
def chain(params):
    return HashChain(params)


@pytest.fixture(scope="session")
def election(params, chain):
    """Three trustee key pairs, their commitments and the joint key."""

    from e2e_core.keys import form_aggregate_key, generate_key_pair, publish_commitments

    base = chain.base_hash()
    pairs = [generate_key_pair(params) for _ in range(params.trustees)]
    keys = [pub for pub, _ in pairs]
    privs = [priv for _, priv in pairs]
    comms = [publish_commitments(chain, base, priv) for priv in privs]
    joint_key = form_aggregate_key(params, keys)
    return {
        "base": base,
        "keys": keys,
        "privs": privs,
        "comms": comms,
        "joint_key": joint_key,
        "prior": chain.election_hash(joint_key),
    }
