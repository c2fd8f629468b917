"""Tests for did_peer.create — numalgo 0, 2 and 4 construction."""
from __future__ import annotations

import json

import pytest

from did_peer.codec import base58_decode, multibase_decode, sha256_multihash
from did_peer.create import (
    build_input_document,
    create,
    create_numalgo0,
    create_numalgo2,
    create_numalgo4,
    encode_input_document,
    hash_encoded_document,
)
from did_peer.document import KeyType, ServiceDescriptor, VerificationMethod
from did_peer.errors import (
    PeerDIDValidationError,
    UnrecognizedNumalgoError,
    UnsupportedNumalgoError,
)

ED25519_MULTIKEY = "z6MkhaXgBZDvotDkL5257faiztiGiC2QtKLGpbnnEGta2doK"
ED25519_MULTIKEY_2 = "z6MkpTHR8VNsBxYAAWHut2Geadd9jSwuBV8xRoAnwWsdvktH"
X25519_MULTIKEY = "z6LSbysY2xFMRpGMhb7tFTLMpeuPRaqaWM1yECx2AtzE3KCc"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def auth_key() -> dict[str, str]:
    return {"type": "Ed25519VerificationKey2020", "publicKeyMultibase": ED25519_MULTIKEY}


@pytest.fixture()
def auth_key_2() -> VerificationMethod:
    return VerificationMethod(type=KeyType.MULTIKEY, public_key_multibase=ED25519_MULTIKEY_2)


@pytest.fixture()
def enc_key() -> dict[str, str]:
    return {"type": "X25519KeyAgreementKey2020", "publicKeyMultibase": X25519_MULTIKEY}


@pytest.fixture()
def didcomm_service() -> dict[str, object]:
    return {
        "id": "#didcomm",
        "type": "DIDCommMessaging",
        "serviceEndpoint": "http://example.com",
    }


# ---------------------------------------------------------------------------
# create dispatch
# ---------------------------------------------------------------------------


class TestCreate:
    def test_numalgo0(self, auth_key: dict[str, str]) -> None:
        assert create(0, [auth_key]) == f"did:peer:0{ED25519_MULTIKEY}"

    def test_numalgo0_requires_a_key(self) -> None:
        with pytest.raises(PeerDIDValidationError):
            create(0, [])

    def test_numalgo1_unsupported(self, auth_key: dict[str, str]) -> None:
        with pytest.raises(UnsupportedNumalgoError, match="NumAlgo1 not supported"):
            create(1, [auth_key])

    def test_numalgo1_is_not_implemented_error(self, auth_key: dict[str, str]) -> None:
        with pytest.raises(NotImplementedError):
            create(1, [auth_key])

    def test_numalgo2(self, auth_key: dict[str, str]) -> None:
        assert create(2, [auth_key]) == f"did:peer:2.V{ED25519_MULTIKEY}"

    def test_numalgo4(self, auth_key: dict[str, str]) -> None:
        assert create(4, [auth_key]).startswith("did:peer:4z")

    @pytest.mark.parametrize("numalgo", [3, 5, -1])
    def test_unrecognized_numalgo(self, numalgo: int, auth_key: dict[str, str]) -> None:
        with pytest.raises(UnrecognizedNumalgoError, match=f"numalgo {numalgo} not recognized"):
            create(numalgo, [auth_key])


# ---------------------------------------------------------------------------
# numalgo 0
# ---------------------------------------------------------------------------


class TestCreateNumAlgo0:
    def test_key_copied_verbatim(self, auth_key: dict[str, str]) -> None:
        did = create_numalgo0(auth_key)
        assert did[9] == "0"
        assert did[10] == "z"
        assert did[10:] == ED25519_MULTIKEY

    def test_accepts_multikey_model(self, auth_key_2: VerificationMethod) -> None:
        assert create_numalgo0(auth_key_2) == f"did:peer:0{ED25519_MULTIKEY_2}"

    def test_rejects_x25519_key(self) -> None:
        with pytest.raises(PeerDIDValidationError) as exc_info:
            create_numalgo0({"type": "X25519KeyAgreementKey2020", "publicKeyMultibase": "z6LS"})
        assert str(exc_info.value) == (
            "verificationMethod type must be Ed25519VerificationKey2020 or Multikey"
        )

    def test_requires_public_key_multibase(self) -> None:
        with pytest.raises(
            PeerDIDValidationError,
            match="verificationMethod must have publicKeyMultibase property",
        ):
            create_numalgo0({"type": "Ed25519VerificationKey2020"})


# ---------------------------------------------------------------------------
# numalgo 2
# ---------------------------------------------------------------------------


class TestCreateNumAlgo2:
    def test_auth_only(self, auth_key: dict[str, str]) -> None:
        did = create_numalgo2([auth_key])
        assert did[9] == "2"
        assert did[10] == "."
        assert did[11] == "V"

    def test_element_order_auth_enc_service(
        self,
        auth_key: dict[str, str],
        auth_key_2: VerificationMethod,
        enc_key: dict[str, str],
        didcomm_service: dict[str, object],
    ) -> None:
        did = create_numalgo2([auth_key, auth_key_2], [enc_key], [didcomm_service])
        elements = did.split(".")[1:]
        assert [element[0] for element in elements] == ["V", "V", "E", "S"]
        assert elements[0] == f"V{ED25519_MULTIKEY}"
        assert elements[1] == f"V{ED25519_MULTIKEY_2}"
        assert elements[2] == f"E{X25519_MULTIKEY}"

    def test_service_classes_after_keys_even_when_given_first(
        self, auth_key: dict[str, str], enc_key: dict[str, str]
    ) -> None:
        did = create_numalgo2([auth_key], [enc_key], {"type": "X", "serviceEndpoint": "https://x"})
        assert did.index(".E") < did.index(".S")

    def test_single_service_accepted(
        self, auth_key: dict[str, str], didcomm_service: dict[str, object]
    ) -> None:
        did = create_numalgo2([auth_key], None, didcomm_service)
        service_location = did.index(".S")
        assert did[service_location + 1] == "S"
        assert did.count(".S") == 1

    def test_rejects_x25519_auth_key(self, enc_key: dict[str, str]) -> None:
        with pytest.raises(PeerDIDValidationError, match="Ed25519VerificationKey2020 or Multikey"):
            create_numalgo2([enc_key])

    def test_rejects_ed25519_encryption_key(self, auth_key: dict[str, str]) -> None:
        with pytest.raises(PeerDIDValidationError, match="X25519KeyAgreementKey2020 or Multikey"):
            create_numalgo2([auth_key], [auth_key])

    def test_requires_encryption_key_material(self, auth_key: dict[str, str]) -> None:
        with pytest.raises(PeerDIDValidationError, match="publicKeyMultibase"):
            create_numalgo2([auth_key], [{"type": "X25519KeyAgreementKey2020"}])

    def test_deterministic(
        self,
        auth_key: dict[str, str],
        enc_key: dict[str, str],
        didcomm_service: dict[str, object],
    ) -> None:
        first = create_numalgo2([auth_key], [enc_key], [didcomm_service])
        second = create_numalgo2([auth_key], [enc_key], [didcomm_service])
        assert first == second


# ---------------------------------------------------------------------------
# numalgo 4
# ---------------------------------------------------------------------------


class TestBuildInputDocument:
    def test_key_ids_start_at_zero_in_append_order(
        self, auth_key: dict[str, str], auth_key_2: VerificationMethod, enc_key: dict[str, str]
    ) -> None:
        document = build_input_document([auth_key, auth_key_2], [enc_key])
        assert [vm["id"] for vm in document["verificationMethod"]] == [
            "#key-0",
            "#key-1",
            "#key-2",
        ]
        assert document["authentication"] == ["#key-0", "#key-1"]
        assert document["keyAgreement"] == ["#key-2"]

    def test_contexts(self, auth_key: dict[str, str]) -> None:
        document = build_input_document([auth_key])
        assert document["@context"] == [
            "https://www.w3.org/ns/did/v1",
            "https://w3id.org/security/multikey/v1",
        ]

    def test_type_defaults_to_multikey(self) -> None:
        document = build_input_document([{"publicKeyMultibase": ED25519_MULTIKEY}])
        assert document["verificationMethod"][0] == {
            "id": "#key-0",
            "type": "Multikey",
            "publicKeyMultibase": ED25519_MULTIKEY,
        }

    def test_no_key_agreement_or_service_when_empty(self, auth_key: dict[str, str]) -> None:
        document = build_input_document([auth_key])
        assert "keyAgreement" not in document
        assert "service" not in document

    def test_services_embedded_uncompressed(
        self, auth_key: dict[str, str], didcomm_service: dict[str, object]
    ) -> None:
        document = build_input_document([auth_key], services=[didcomm_service])
        assert document["service"] == [didcomm_service]

    def test_service_members_kept_in_caller_order(self, auth_key: dict[str, str]) -> None:
        """Mapping services are embedded as given so the hash covers the caller's JSON."""
        service = {"type": "X", "serviceEndpoint": "https://e", "id": "#s", "accept": None}
        document = build_input_document([auth_key], services=[service])
        assert list(document["service"][0]) == ["type", "serviceEndpoint", "id", "accept"]
        assert document["service"][0]["accept"] is None
        embedded = json.loads(multibase_decode(encode_input_document(document)))
        assert list(embedded["service"][0]) == ["type", "serviceEndpoint", "id", "accept"]

    def test_model_service_serialized_without_nulls(self, auth_key: dict[str, str]) -> None:
        service = ServiceDescriptor(id="#s", type="X", service_endpoint="https://e")
        document = build_input_document([auth_key], services=service)
        assert document["service"] == [{"id": "#s", "type": "X", "serviceEndpoint": "https://e"}]

    def test_rejects_invalid_service(self, auth_key: dict[str, str]) -> None:
        with pytest.raises(PeerDIDValidationError):
            build_input_document([auth_key], services=[{"type": "X", "routingKeys": "not-a-list"}])

    def test_rejects_key_without_multibase(self) -> None:
        with pytest.raises(PeerDIDValidationError, match="publicKeyMultibase"):
            build_input_document([{"type": "Multikey"}])


class TestCreateNumAlgo4:
    def test_long_form_shape(self, auth_key: dict[str, str]) -> None:
        did = create_numalgo4([auth_key])
        parts = did.split(":")
        assert len(parts) == 4
        assert parts[:2] == ["did", "peer"]
        assert parts[2].startswith("4z")
        assert parts[3].startswith("z")

    def test_deterministic(self, auth_key: dict[str, str], enc_key: dict[str, str]) -> None:
        """Identical input yields byte-identical identifiers."""
        assert create_numalgo4([auth_key], [enc_key]) == create_numalgo4([auth_key], [enc_key])

    def test_different_keys_give_different_hashes(
        self, auth_key: dict[str, str], auth_key_2: VerificationMethod
    ) -> None:
        first = create_numalgo4([auth_key]).split(":")[2]
        second = create_numalgo4([auth_key_2]).split(":")[2]
        assert first != second

    def test_document_is_plain_json_without_multicodec_prefix(
        self, auth_key: dict[str, str]
    ) -> None:
        encoded_document = create_numalgo4([auth_key]).split(":")[3]
        raw = multibase_decode(encoded_document)
        assert raw.startswith(b"{")
        assert json.loads(raw) == build_input_document([auth_key])

    def test_hash_covers_encoded_document_text(self, auth_key: dict[str, str]) -> None:
        _, _, hash_segment, encoded_document = create_numalgo4([auth_key]).split(":")
        multihash = base58_decode(hash_segment[2:])
        assert multihash == sha256_multihash(encoded_document.encode("utf-8"))
        assert hash_segment == hash_encoded_document(encoded_document)

    def test_encode_input_document_is_compact(self) -> None:
        encoded = encode_input_document({"a": [1, 2], "b": "c"})
        assert multibase_decode(encoded) == b'{"a":[1,2],"b":"c"}'
