import pytest

from e2e_core import StructuralError
from e2e_core.encoding import decode_int, deserialize, encode_int, from_dict, serialize, to_dict
from e2e_core.proofs import encrypt_contest_with_proofs, encrypt_with_proof
from e2e_core.records import (
    CPProofDisj,
    EncryptedContest,
    EncryptedMessage,
    PublicKeyCommitments,
)


def test_fixed_width_integers():
    assert encode_int(1, 16) == b"\x00\x01"
    assert decode_int(b"\x01\x00", 16) == 256
    with pytest.raises(StructuralError):
        encode_int(1 << 16, 16)
    with pytest.raises(StructuralError):
        encode_int(-1, 16)
    with pytest.raises(StructuralError):
        decode_int(b"\x01", 16)


def test_encrypted_message_layout(toy):
    data = serialize(EncryptedMessage(public_key=16, ciphertext=8), toy.elem_bits)
    assert data == bytes([16, 8])
    assert deserialize(EncryptedMessage, data, toy.elem_bits) == EncryptedMessage(16, 8)


def test_nested_records(params, chain, election):
    _, proof = encrypt_with_proof(chain, election["prior"], election["joint_key"], 1)
    data = serialize(proof, params.elem_bits)
    # two branches of (a, b, c, v)
    assert len(data) == 8 * params.elem_bytes
    assert deserialize(CPProofDisj, data, params.elem_bits) == proof


def test_sequences_carry_a_length_prefix(params, election):
    comms = election["comms"][0]
    data = serialize(comms, params.elem_bits)
    assert data[0] == params.threshold
    assert deserialize(PublicKeyCommitments, data, params.elem_bits) == comms


def test_malformed_bytes_rejected(params, election):
    data = serialize(election["comms"][1], params.elem_bits)
    with pytest.raises(StructuralError):
        deserialize(PublicKeyCommitments, data + b"\x00", params.elem_bits)
    with pytest.raises(StructuralError):
        deserialize(PublicKeyCommitments, data[:-1], params.elem_bits)
    with pytest.raises(StructuralError):
        serialize(12, params.elem_bits)


def test_dict_form(params, chain, election):
    contest = encrypt_contest_with_proofs(chain, election["prior"], election["joint_key"], [1, 0])
    as_dict = to_dict(contest)
    assert isinstance(as_dict["selections"][0]["public_key"], int)
    assert from_dict(EncryptedContest, as_dict) == contest

    del as_dict["aggregate_proof"]
    with pytest.raises(StructuralError):
        from_dict(EncryptedContest, as_dict)
    with pytest.raises(StructuralError):
        from_dict(EncryptedMessage, {"public_key": True, "ciphertext": 1})
    with pytest.raises(StructuralError):
        from_dict(EncryptedMessage, None)
