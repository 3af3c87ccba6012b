# ============================================================================
# tests/test_mint.py
# 721 document construction
# ============================================================================

import json
import logging
import xml.etree.ElementTree as ET
from unittest.mock import MagicMock

import pytest
import requests

from httpclient import IndexerError
from mint import (
    build_mint_metadata,
    ensure_metadata_strings_fit,
    estimate_sequence,
    sanitize_metadata_tree,
    time_bucket_sequence,
)
from models import EncryptedPayload
from quick_burn import decode_quick_burn_id_to_unit
from svg_bubble import from_embeddable_uri
from text_encoding import decode_base64_to_utf8, join_segments


def _indexer(count=4):
    indexer = MagicMock()
    indexer.count_policy_assets.return_value = count
    return indexer


def _asset(result, policy_id):
    return result.metadata[policy_id][result.asset_name_base]


def _all_strings(value):
    if isinstance(value, dict):
        for k, v in value.items():
            yield k
            yield from _all_strings(v)
    elif isinstance(value, list):
        for v in value:
            yield from _all_strings(v)
    elif isinstance(value, str):
        yield value


class TestSequence:
    def test_count_plus_one(self, policy_id, mint_time):
        indexer = _indexer(41)
        assert estimate_sequence(indexer, policy_id, mint_time) == 42
        indexer.count_policy_assets.assert_called_once_with(policy_id)

    @pytest.mark.parametrize("error", [IndexerError(500, "https://x"), requests.ConnectionError("down")])
    def test_failure_falls_back_to_time_bucket(self, policy_id, mint_time, error, caplog):
        indexer = MagicMock()
        indexer.count_policy_assets.side_effect = error
        with caplog.at_level(logging.WARNING):
            seq = estimate_sequence(indexer, policy_id, mint_time)
        assert seq == time_bucket_sequence(mint_time)
        assert indexer.count_policy_assets.call_count == 1
        assert "time bucket" in caplog.text

    def test_no_indexer(self, policy_id, mint_time):
        assert estimate_sequence(None, policy_id, mint_time) == time_bucket_sequence(mint_time)

    def test_time_bucket_range(self, mint_time):
        hours = int(mint_time.timestamp()) // 3600
        assert time_bucket_sequence(mint_time) == (hours % 1000 or 1)
        assert 1 <= time_bucket_sequence(mint_time) <= 999


class TestTreeHygiene:
    def test_sanitize(self):
        tree = {"a": 1.5, "b": True, "c": None, "d": [1, None, 2.0], "e": {"f": "x", "g": None}}
        assert sanitize_metadata_tree(tree) == {"a": "1.5", "b": "true", "d": [1, "2"], "e": {"f": "x"}}

    def test_strings_fit(self):
        ensure_metadata_strings_fit({"a": ["x" * 64], "b": 10 ** 12})

    def test_long_string_rejected(self):
        with pytest.raises(ValueError, match="/a"):
            ensure_metadata_strings_fit({"a": "x" * 65})

    def test_multibyte_counts_bytes(self):
        with pytest.raises(ValueError):
            ensure_metadata_strings_fit({"a": "č" * 33})


class TestPlaintextMint:
    @pytest.fixture
    def result(self, sender, receiver, policy_id, mint_time):
        return build_mint_metadata(sender, receiver, 'Ahoj "svet" 😀', policy_id,
                                   indexer=_indexer(4), now=mint_time, disambiguator="beef",
                                   max_image_uri_length=0)

    def test_asset_name_and_unit(self, result, sender, receiver, policy_id):
        name = f"matotam-{sender[-3:]}-{receiver[-3:]}-005-beef"
        assert result.asset_name_base == name
        assert result.unit == policy_id + name.encode("utf-8").hex()
        assert list(result.metadata) == [policy_id]
        assert list(result.metadata[policy_id]) == [name]

    def test_quick_burn_id_resolves_to_unit(self, result, policy_id):
        asset = _asset(result, policy_id)
        assert decode_quick_burn_id_to_unit(asset["quickBurnId"]) == result.unit
        assert decode_quick_burn_id_to_unit(result.quick_burn_id) == result.unit

    def test_fields(self, result, sender, receiver, policy_id):
        asset = _asset(result, policy_id)
        assert join_segments(asset["Sender"]) == sender
        assert join_segments(asset["Receiver"]) == receiver
        assert asset["Thread"] == f"matotam-{sender[-3:]}-{receiver[-3:]}"
        assert asset["Thread index"] == "005"
        assert asset["createdAt"] == "2026-03-14T15:09:26.000Z"
        assert asset["rarity"] == "Y00D073"
        assert asset["version"] == "matotam-metadata-v2"
        assert asset["source"] == "https://matotam.io"
        assert asset["messageMode"] == "plaintext"
        assert "matotam.io" in join_segments(asset["Burn info"])
        assert set(asset["sigil"]) >= {"color", "interior", "frame", "rating"}

    def test_message_views(self, result, policy_id):
        asset = _asset(result, policy_id)
        assert join_segments(asset["Message"]) == "Ahoj 'svet' "
        assert decode_base64_to_utf8(join_segments(asset["messageEncodedSegments"])) == 'Ahoj "svet" 😀'

    def test_every_string_fits_64_bytes(self, result):
        for text in _all_strings(result.metadata):
            assert len(text.encode("utf-8")) <= 64

    def test_numbers_are_integers_or_strings(self, result, policy_id):
        sigil = _asset(result, policy_id)["sigil"]
        assert isinstance(sigil["colorProbability"], str)

    def test_image_is_complete_svg(self, result, policy_id):
        asset = _asset(result, policy_id)
        assert asset["mediaType"] == "image/svg+xml"
        svg = from_embeddable_uri(join_segments(asset["image"]))
        assert svg.startswith("<svg")
        assert svg.endswith("</svg>")
        assert "Y00D073" in svg

    def test_json_serializable(self, result):
        json.dumps(result.metadata)


class TestMintEdges:
    def test_image_omitted_above_ceiling(self, sender, receiver, policy_id, mint_time, caplog):
        with caplog.at_level(logging.WARNING):
            result = build_mint_metadata(sender, receiver, "hi", policy_id, now=mint_time,
                                         disambiguator="0000", max_image_uri_length=100)
        asset = _asset(result, policy_id)
        assert "image" not in asset
        assert "mediaType" not in asset
        assert "leaving image out" in caplog.text

    def test_offline_sequence(self, sender, receiver, policy_id, mint_time):
        result = build_mint_metadata(sender, receiver, "hi", policy_id, now=mint_time, disambiguator="0000")
        assert _asset(result, policy_id)["Thread index"] == f"{time_bucket_sequence(mint_time):03d}"

    def test_explicit_sequence_skips_indexer(self, sender, receiver, policy_id, mint_time):
        indexer = _indexer()
        result = build_mint_metadata(sender, receiver, "hi", policy_id, indexer=indexer,
                                     now=mint_time, disambiguator="0000", sequence=7)
        assert result.asset_name_base.endswith("-007-0000")
        indexer.count_policy_assets.assert_not_called()

    def test_random_disambiguator(self, sender, receiver, policy_id, mint_time):
        result = build_mint_metadata(sender, receiver, "hi", policy_id, now=mint_time)
        suffix = result.asset_name_base.rsplit("-", 1)[1]
        assert len(suffix) == 4
        int(suffix, 16)

    def test_oversized_asset_name_rejected(self, sender, receiver, policy_id, mint_time):
        with pytest.raises(ValueError, match="Asset name"):
            build_mint_metadata(sender, receiver, "hi", policy_id, now=mint_time,
                                disambiguator="x" * 20)

    def test_message_is_trimmed_to_256(self, sender, receiver, policy_id, mint_time):
        result = build_mint_metadata(sender, receiver, "  " + "m" * 400, policy_id, now=mint_time,
                                     disambiguator="0000", max_image_uri_length=0)
        assert join_segments(_asset(result, policy_id)["Message"]) == "m" * 256

    def test_empty_message(self, sender, receiver, policy_id, mint_time):
        result = build_mint_metadata(sender, receiver, "", policy_id, now=mint_time,
                                     disambiguator="0000", max_image_uri_length=0)
        asset = _asset(result, policy_id)
        assert "(empty message)" in from_embeddable_uri(join_segments(asset["image"]))

    def test_control_characters_keep_image_well_formed(self, sender, receiver, policy_id, mint_time):
        result = build_mint_metadata(sender, receiver, "hi \x07 there", policy_id, now=mint_time,
                                     disambiguator="0000", max_image_uri_length=0)
        asset = _asset(result, policy_id)
        root = ET.fromstring(from_embeddable_uri(join_segments(asset["image"])))
        texts = [t.text for t in root.iter("{http://www.w3.org/2000/svg}text")]
        assert "hi there" in texts
        assert decode_base64_to_utf8(join_segments(asset["messageEncodedSegments"])) == "hi \x07 there"

    def test_non_ascii_addresses_chunked_by_bytes(self, policy_id, mint_time):
        sender = "adresa-" + "\u017e" * 60 + "aa7"
        receiver = "prijemca-" + "\U0001F600" * 40 + "jqp"
        result = build_mint_metadata(sender, receiver, "hi", policy_id, now=mint_time,
                                     disambiguator="0000", max_image_uri_length=0)
        asset = _asset(result, policy_id)
        assert join_segments(asset["Sender"]) == sender
        assert join_segments(asset["Receiver"]) == receiver
        assert all(len(s.encode("utf-8")) <= 64 for s in asset["Sender"] + asset["Receiver"])


class TestEncryptedMint:
    SECRET = "meet me at the old oak"

    @pytest.fixture
    def payload(self):
        return EncryptedPayload(cipher_text="Q" * 150, nonce="bm9uY2Vub25jZTEy",
                                salt="c2FsdHNhbHRzYWx0c2FsdA==", iterations=210000)

    @pytest.fixture
    def result(self, sender, receiver, policy_id, mint_time, payload):
        return build_mint_metadata(sender, receiver, self.SECRET, policy_id, payload,
                                   now=mint_time, disambiguator="beef", max_image_uri_length=0)

    def test_placeholder_only(self, result, policy_id):
        asset = _asset(result, policy_id)
        assert asset["Message"] == ["(encrypted message)"]
        assert asset["messageMode"] == "encrypted"
        assert "messageEncodedSegments" not in asset

    def test_plaintext_never_leaks(self, result, policy_id):
        assert self.SECRET not in json.dumps(result.metadata)
        svg = from_embeddable_uri(join_segments(_asset(result, policy_id)["image"]))
        assert self.SECRET not in svg
        assert "(encrypted message)" in svg

    def test_payload_chunked(self, result, policy_id, payload):
        enc = _asset(result, policy_id)["matotam_encrypted"]
        assert [len(c) for c in enc["cipherText"]] == [64, 64, 22]
        assert enc["nonce"] == payload.nonce
        assert enc["salt"] == payload.salt
        assert enc["iterations"] == 210000
        assert enc["version"] == "v1"
