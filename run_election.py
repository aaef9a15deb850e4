"""Reference runner that walks through a small simulated election.

Run this script from the repository root:
    python run_election.py --trustees 3 --threshold 2 --voters 5
"""

import argparse
import hashlib
import logging
import secrets

from e2e_core import HashChain, params_512
from e2e_core.decryption import (
    check_tally,
    full_decrypt,
    tally_value,
    threshold_decrypt,
)
from e2e_core.encryption import accumulate_contests
from e2e_core.keys import (
    combine_key_shares,
    decrypt_key_share,
    form_aggregate_key,
    generate_key_pair,
    generate_key_share,
    publish_commitments,
    share_public_key,
    verify_key_share,
    verify_public_key_commitments,
)
from e2e_core.logs import setup_logging
from e2e_core.proofs import (
    check_trustee_decrypt_proof,
    encrypt_contest_with_proofs,
    trustee_decrypt_proof,
    verify_encrypted_contest,
)

logger = logging.getLogger("run_election")


def _print_heading(msg: str):
    print()
    print(msg)


def _print_kv(key: str, value: str):
    print(f"  {key}: {value}")


def _fingerprint(value: int) -> str:
    return hashlib.sha256(str(value).encode()).hexdigest()[:8]


def main():
    p = argparse.ArgumentParser()
    p.add_argument("--trustees", type=int, default=3)
    p.add_argument("--threshold", type=int, default=2)
    p.add_argument("--voters", type=int, default=5)
    p.add_argument("--selections", type=int, default=3)
    p.add_argument("--log-level", default="WARNING")
    args = p.parse_args()
    setup_logging(args.log_level)

    params = params_512(trustees=args.trustees, threshold=args.threshold)
    chain = HashChain(params)
    base = chain.base_hash()

    # Step 1: key ceremony
    _print_heading("[Step 1] Key ceremony")
    keys, privs, comms = [], [], []
    for t in range(1, params.trustees + 1):
        pub, priv = generate_key_pair(params)
        c = publish_commitments(chain, base, priv)
        keys.append(pub)
        privs.append(priv)
        comms.append(c)
        ok = verify_public_key_commitments(chain, base, c)
        _print_kv(f"trustee {t}", f"key {_fingerprint(pub)} commitments {'OK' if ok else 'FAIL'}")
    joint_key = form_aggregate_key(params, keys)
    prior = chain.election_hash(joint_key)
    _print_kv("joint key", _fingerprint(joint_key))

    # Step 2: key shares for threshold decryption
    _print_heading("[Step 2] Key share exchange")
    received = {j: [] for j in range(1, params.trustees + 1)}
    for sender, priv in enumerate(privs, start=1):
        for j in range(1, params.trustees + 1):
            share = generate_key_share(chain, base, priv, j, keys[j - 1])
            value = decrypt_key_share(chain, base, privs[j - 1].secret, share)
            if not verify_key_share(params, comms[sender - 1], j, value):
                _print_kv(f"share {sender}->{j}", "FAIL")
                continue
            received[j].append(value)
    combined_shares = {
        j: combine_key_shares(params, vals)
        for j, vals in received.items()
        if len(vals) == params.trustees
    }
    for j in sorted(set(received) - set(combined_shares)):
        _print_kv(f"trustee {j}", "excluded from threshold decryption")
    _print_kv("shares verified", str(sum(len(v) for v in received.values())))

    # Step 3: voters cast contests with proofs
    _print_heading("[Step 3] Casting ballots")
    ballots = []
    for v in range(args.voters):
        contest = [0] * args.selections
        contest[secrets.randbelow(args.selections)] = 1
        enc = encrypt_contest_with_proofs(chain, prior, joint_key, contest)
        ok = verify_encrypted_contest(chain, prior, joint_key, enc, 1)
        _print_kv(f"voter {v + 1}", "proofs OK" if ok else f"REJECTED ({ok.failure})")
        if ok:
            ballots.append(enc.selections)

    # Step 4: homomorphic tally with partial decryption proofs
    _print_heading("[Step 4] Tally")
    aggregated = accumulate_contests(params, ballots)
    for idx, msg in enumerate(aggregated):
        partials = []
        for t, (priv, key) in enumerate(zip(privs, keys), start=1):
            partial, proof = trustee_decrypt_proof(chain, prior, priv.secret, msg)
            if not check_trustee_decrypt_proof(chain, prior, key, msg, partial, proof):
                logger.warning(f"trustee {t} partial decryption rejected for selection {idx}")
            partials.append(partial)
        value = full_decrypt(params, partials, msg)
        count = tally_value(params, value, len(ballots))
        if count is None:
            _print_kv(f"selection {idx}", "tally out of range")
            continue
        _print_kv(f"selection {idx}", f"{count} (check {check_tally(params, value, count)})")

        # Step 5: the same result from a threshold quorum
        quorum = sorted(combined_shares)[: params.threshold]
        if len(quorum) < params.threshold:
            _print_kv("  quorum", "not enough verified key shares")
            continue
        threshold_partials = {}
        for j in quorum:
            share_key = share_public_key(params, comms, j)
            partial, proof = trustee_decrypt_proof(chain, prior, combined_shares[j], msg)
            if check_trustee_decrypt_proof(chain, prior, share_key, msg, partial, proof):
                threshold_partials[j] = partial
        recovered = threshold_decrypt(params, threshold_partials, msg)
        _print_kv(f"  quorum {quorum}", "matches" if recovered == value else "MISMATCH")


if __name__ == "__main__":
    main()
