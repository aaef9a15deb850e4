"""Minimal Flask API for verifying election artifacts.

Endpoints:
- POST /init -> set election parameters {"preset": "512"} or {"params": {...}}
- GET /params -> return the active parameters
- POST /verify/selection -> check a disjunctive 0/1 proof
- POST /verify/contest -> check an encrypted contest and its count proof
- POST /verify/decryption -> check a trustee partial decryption proof
- POST /verify/commitments -> check a trustee's public key commitments
- POST /tally/check -> compare a decrypted value with a claimed tally

Group elements travel as JSON integers, prior hashes as hex strings. When no
"prior" is given, selection and contest proofs are checked against the
election hash of "key"; decryption proofs need "joint_key" instead.
"""

import logging
from typing import Any, Dict

from flask import Flask, jsonify, request

from .config import params_512, params_default, params_from_dict, toy_params
from .decryption import check_tally
from .encoding import from_dict
from .errors import ConfigurationError, StructuralError
from .hashing import HashChain
from .keys import verify_public_key_commitments
from .proofs import (
    check_trustee_decrypt_proof,
    verify_cp_proof_disj,
    verify_encrypted_contest,
)
from .records import CPProof, CPProofDisj, EncryptedContest, EncryptedMessage, PublicKeyCommitments

logger = logging.getLogger(__name__)

app = Flask(__name__)

_PRESETS = {"toy": toy_params, "512": params_512, "default": params_default}

# Active election parameters and their hash chain
_STATE: Dict[str, Any] = {
    "params": None,
    "chain": None,
}


def configure(params) -> None:
    _STATE["params"] = params
    _STATE["chain"] = HashChain(params)


def _chain() -> HashChain:
    chain = _STATE["chain"]
    if chain is None:
        raise StructuralError("election parameters not initialized")
    return chain


def _int_field(data: Dict[str, Any], name: str) -> int:
    value = data.get(name)
    if isinstance(value, bool) or not isinstance(value, int):
        raise StructuralError(f"missing or invalid '{name}'")
    return value


def _prior(data: Dict[str, Any], chain: HashChain, key: int = None) -> bytes:
    prior = data.get("prior")
    if prior is None:
        return chain.base_hash() if key is None else chain.election_hash(key)
    try:
        return bytes.fromhex(prior)
    except (TypeError, ValueError):
        raise StructuralError("'prior' must be a hex string") from None


@app.errorhandler(StructuralError)
def _structural(e):
    return jsonify({"error": str(e)}), 400


@app.errorhandler(ConfigurationError)
def _configuration(e):
    return jsonify({"error": str(e)}), 400


@app.route("/init", methods=["POST"])
def init_election():
    """Initialize election parameters from a preset or explicit values."""

    data = request.get_json(silent=True) or {}
    if "params" in data:
        params = params_from_dict(data["params"])
    else:
        preset = _PRESETS.get(str(data.get("preset", "512")))
        if preset is None:
            return jsonify({"error": "unknown preset"}), 400
        kwargs = {}
        for name in ("trustees", "threshold"):
            if name in data:
                kwargs[name] = _int_field(data, name)
        params = preset(**kwargs) if kwargs else preset()
    configure(params)
    logger.info(f"election initialized: {params.trustees} trustees, threshold {params.threshold}")
    return jsonify({"status": "initialized", "params": params.to_dict()})


@app.route("/params", methods=["GET"])
def get_params():
    chain = _chain()
    return jsonify({"params": chain.params.to_dict(), "base_hash": chain.base_hash().hex()})


@app.route("/verify/selection", methods=["POST"])
def verify_selection():
    chain = _chain()
    data = request.get_json(silent=True) or {}
    key = _int_field(data, "key")
    msg = from_dict(EncryptedMessage, data.get("message"))
    proof = from_dict(CPProofDisj, data.get("proof"))
    result = verify_cp_proof_disj(chain, _prior(data, chain, key), key, msg, proof)
    return jsonify(result.to_dict())


@app.route("/verify/contest", methods=["POST"])
def verify_contest():
    chain = _chain()
    data = request.get_json(silent=True) or {}
    key = _int_field(data, "key")
    count = _int_field(data, "selections_count")
    contest = from_dict(EncryptedContest, data.get("contest"))
    result = verify_encrypted_contest(chain, _prior(data, chain, key), key, contest, count)
    return jsonify(result.to_dict())


@app.route("/verify/decryption", methods=["POST"])
def verify_decryption():
    """Expects {"key", "message", "partial", "proof"} plus "prior" or "joint_key"

    "key" is the trustee's key; proofs are bound to the election hash of the
    joint key, so one of the two must be supplied.
    """

    chain = _chain()
    data = request.get_json(silent=True) or {}
    key = _int_field(data, "key")
    partial = _int_field(data, "partial")
    msg = from_dict(EncryptedMessage, data.get("message"))
    proof = from_dict(CPProof, data.get("proof"))
    if data.get("prior") is None:
        prior = chain.election_hash(_int_field(data, "joint_key"))
    else:
        prior = _prior(data, chain)
    result = check_trustee_decrypt_proof(chain, prior, key, msg, partial, proof)
    return jsonify(result.to_dict())


@app.route("/verify/commitments", methods=["POST"])
def verify_commitments():
    chain = _chain()
    data = request.get_json(silent=True) or {}
    comms = from_dict(PublicKeyCommitments, data.get("commitments"))
    result = verify_public_key_commitments(chain, _prior(data, chain), comms)
    return jsonify(result.to_dict())


@app.route("/tally/check", methods=["POST"])
def tally_check():
    chain = _chain()
    data = request.get_json(silent=True) or {}
    ok = check_tally(chain.params, _int_field(data, "value"), _int_field(data, "tally"))
    return jsonify({"ok": ok})


if __name__ == "__main__":
    from .logs import setup_logging

    setup_logging()
    configure(params_512())
    app.run(debug=True)
