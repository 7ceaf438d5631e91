"""Unit tests for request body decoding and field validation.

WHY: The body decoder is the compatibility layer for clients that send
UTF-16LE. The field validator decides which error a client sees when a
request is incomplete. Both run before anything else.

HOW: Bodies are encoded with json.dumps + str.encode in the encoding
under test; decode results are compared with the original dict.
"""

import base64
import codecs
import json

import pytest

from conftest import build_pcm_wav, encode_body, request_body
from pronunciation_assessor.core.errors import DecodeError, InvalidContainer, MissingField
from pronunciation_assessor.core.request import (
    DECODE_STRATEGIES,
    AssessmentRequest,
    DecodeStrategy,
    decode_audio_base64,
    decode_json_body,
    read_assessment_request,
    validate_fields,
)


class TestDecodeStrategies:
    def test_order_is_utf8_then_utf16le(self):
        assert [s.name for s in DECODE_STRATEGIES] == ["UTF-8", "UTF-16LE"]

    def test_attempt_reports_failure_without_raising(self):
        attempt = DecodeStrategy(name="UTF-8", codec="utf-8").attempt(b"\xff\xfe{")
        assert attempt.ok is False
        assert attempt.error

    def test_attempt_success_carries_value(self):
        attempt = DecodeStrategy(name="UTF-8", codec="utf-8").attempt(b'{"a": 1}')
        assert attempt.ok is True
        assert attempt.value == {"a": 1}


class TestDecodeJsonBody:
    def test_utf8_body(self):
        body = request_body()
        assert decode_json_body(encode_body(body)) == body

    def test_utf8_non_ascii(self):
        body = {"referenceText": "Grüß Gott, ça va?"}
        raw = json.dumps(body, ensure_ascii=False).encode("utf-8")
        assert decode_json_body(raw) == body

    def test_utf16le_fallback(self):
        body = request_body(reference_text="Bonjour, ça va ?", locale="fr-FR")
        raw = json.dumps(body, ensure_ascii=False).encode("utf-16-le")
        assert decode_json_body(raw) == body

    def test_utf16le_ascii_only_body(self):
        """ASCII JSON in UTF-16LE is valid UTF-8 text but not valid JSON."""
        body = request_body()
        raw = encode_body(body, "utf-16-le")
        raw.decode("utf-8")  # decodes fine; the NULs break JSON parsing
        assert decode_json_body(raw) == body

    def test_utf16le_with_bom(self):
        body = {"locale": "en-US"}
        raw = codecs.BOM_UTF16_LE + encode_body(body, "utf-16-le")
        assert decode_json_body(raw) == body

    def test_utf8_with_bom(self):
        raw = codecs.BOM_UTF8 + b'{"locale": "en-US"}'
        assert decode_json_body(raw) == {"locale": "en-US"}

    def test_invalid_under_both_encodings(self):
        with pytest.raises(DecodeError) as excinfo:
            decode_json_body(b"not json at all")
        assert "UTF-8" in str(excinfo.value)
        assert "UTF-16LE" in str(excinfo.value)
        assert excinfo.value.status_code == 400

    def test_empty_body(self):
        with pytest.raises(DecodeError):
            decode_json_body(b"")

    def test_utf16_big_endian_not_supported(self):
        raw = encode_body({"locale": "en-US"}, "utf-16-be")
        with pytest.raises(DecodeError):
            decode_json_body(raw)

    def test_stray_latin1_byte_replaced(self):
        raw = b'{"audioBase64":"UklGRg==","referenceText":"caf\xe9","locale":"fr-FR"}'
        assert decode_json_body(raw) == {
            "audioBase64": "UklGRg==",
            "referenceText": "caf\ufffd",
            "locale": "fr-FR",
        }

    def test_utf8_strategy_replaces_invalid_bytes(self):
        attempt = DECODE_STRATEGIES[0].attempt(b'"caf\xe9"')
        assert attempt.ok is True
        assert attempt.value == "caf\ufffd"

    def test_nesting_too_deep(self):
        with pytest.raises(DecodeError):
            decode_json_body(b"[" * 200000)

    def test_non_object_json_is_returned_as_is(self):
        assert decode_json_body(b"null") is None
        assert decode_json_body(b"[1, 2]") == [1, 2]


class TestValidateFields:
    def test_all_fields_present(self):
        request = validate_fields({"audioBase64": "UklGRg==", "referenceText": "Hi", "locale": "en-US"})
        assert request == AssessmentRequest(
            audio_base64="UklGRg==", reference_text="Hi", locale="en-US"
        )

    @pytest.mark.parametrize("missing", ["audioBase64", "referenceText", "locale"])
    def test_each_missing_field_named(self, missing):
        body = {"audioBase64": "UklGRg==", "referenceText": "Hi", "locale": "en-US"}
        del body[missing]
        with pytest.raises(MissingField) as excinfo:
            validate_fields(body)
        assert excinfo.value.field == missing
        assert str(excinfo.value) == "{} (string) is required.".format(missing)

    def test_missing_locale_only_names_locale(self):
        with pytest.raises(MissingField) as excinfo:
            validate_fields({"audioBase64": "UklGRg==", "referenceText": "Hi"})
        message = str(excinfo.value)
        assert "locale" in message
        assert "audioBase64" not in message
        assert "referenceText" not in message

    @pytest.mark.parametrize("value", ["", None, 0, False])
    def test_falsy_values_count_as_missing(self, value):
        with pytest.raises(MissingField):
            validate_fields({"audioBase64": "UklGRg==", "referenceText": value, "locale": "en-US"})

    def test_fields_checked_in_order(self):
        with pytest.raises(MissingField) as excinfo:
            validate_fields({})
        assert excinfo.value.field == "audioBase64"

        with pytest.raises(MissingField) as excinfo:
            validate_fields({"audioBase64": "x"})
        assert excinfo.value.field == "referenceText"

    @pytest.mark.parametrize("value", [None, [], "text", 42])
    def test_non_object_reports_first_field(self, value):
        with pytest.raises(MissingField) as excinfo:
            validate_fields(value)
        assert excinfo.value.field == "audioBase64"

    def test_extra_fields_ignored(self):
        request = validate_fields(
            {"audioBase64": "x", "referenceText": "y", "locale": "z", "extra": True}
        )
        assert request.locale == "z"


class TestReadAssessmentRequest:
    def test_utf16le_body_end_to_end(self):
        body = request_body()
        request = read_assessment_request(encode_body(body, "utf-16-le"))
        assert request.reference_text == body["referenceText"]
        assert request.audio_base64 == body["audioBase64"]

    def test_decode_error_before_field_check(self):
        with pytest.raises(DecodeError):
            read_assessment_request(b"{broken")


class TestDecodeAudioBase64:
    def test_round_trip(self):
        wav = build_pcm_wav()
        body = request_body(wav)
        assert decode_audio_base64(body["audioBase64"]) == wav

    def test_unpadded_input(self):
        assert decode_audio_base64("UklGRg") == b"RIFF"

    def test_extra_padding_ignored(self):
        assert decode_audio_base64("UklGRg====") == b"RIFF"

    def test_whitespace_ignored(self):
        wav = build_pcm_wav()
        encoded = request_body(wav)["audioBase64"]
        wrapped = "\n".join(encoded[i:i + 76] for i in range(0, len(encoded), 76))
        assert decode_audio_base64(wrapped) == wav

    def test_url_safe_alphabet(self):
        data = bytes([0xFB, 0xFF, 0xBF, 0xFE]) * 3
        assert decode_audio_base64(base64.urlsafe_b64encode(data).decode("ascii")) == data

    def test_impossible_length_is_client_error(self):
        with pytest.raises(InvalidContainer, match="base64"):
            decode_audio_base64("UklGR")

    def test_foreign_characters_are_client_error(self):
        with pytest.raises(InvalidContainer):
            decode_audio_base64("UklG*Rg==")

    def test_non_string_is_client_error(self):
        with pytest.raises(InvalidContainer):
            decode_audio_base64(12345)

    def test_non_ascii_is_client_error(self):
        with pytest.raises(InvalidContainer):
            decode_audio_base64("ÿÿÿÿ")
