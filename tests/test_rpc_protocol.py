"""Tests for the newline-delimited JSON codec."""

import json
import math

import pytest

from chainipc.rpc.protocol import (
    DecodeError,
    EncodeError,
    Request,
    Response,
    decode_request,
    decode_response,
    encode_request,
    encode_response,
)


class TestDecodeRequest:
    """Tests for decode_request."""

    def test_decodes_valid_request(self):
        request = decode_request(b'{"id":1,"method":"getblockcount","params":[]}\n')
        assert request == Request(id=1, method="getblockcount", params=[])

    def test_accepts_frame_without_newline(self):
        request = decode_request(b'{"id":2,"method":"getblockhash","params":[5]}')
        assert request.id == 2
        assert request.params == [5]

    def test_preserves_param_types(self):
        raw = json.dumps(
            {"id": 3, "method": "m", "params": [1, "a", True, None, {"k": [1.5]}]}
        ).encode()
        assert decode_request(raw).params == [1, "a", True, None, {"k": [1.5]}]

    def test_ignores_unknown_fields(self):
        raw = b'{"id":1,"method":"m","params":[],"jsonrpc":"2.0"}'
        assert decode_request(raw).method == "m"

    def test_invalid_json(self):
        with pytest.raises(DecodeError, match="Invalid JSON"):
            decode_request(b"{not json\n")

    @pytest.mark.parametrize("constant", ["NaN", "Infinity", "-Infinity"])
    def test_rejects_non_json_constants(self, constant):
        raw = f'{{"id":1,"method":"m","params":[{constant}]}}'.encode()
        with pytest.raises(DecodeError, match="Invalid JSON"):
            decode_request(raw)

    def test_invalid_utf8(self):
        with pytest.raises(DecodeError, match="UTF-8"):
            decode_request(b'{"id":1,"method":"\xff","params":[]}')

    def test_non_object_payload(self):
        with pytest.raises(DecodeError, match="JSON object"):
            decode_request(b"[1, 2, 3]")

    @pytest.mark.parametrize("request_id", [None, "1", 1.5, True])
    def test_id_must_be_integer(self, request_id):
        raw = json.dumps({"id": request_id, "method": "m", "params": []}).encode()
        with pytest.raises(DecodeError, match="id"):
            decode_request(raw)

    def test_missing_id(self):
        with pytest.raises(DecodeError, match="id"):
            decode_request(b'{"method":"m","params":[]}')

    @pytest.mark.parametrize("method", ["", 5, None])
    def test_method_must_be_non_empty_string(self, method):
        raw = json.dumps({"id": 7, "method": method, "params": []}).encode()
        with pytest.raises(DecodeError) as exc_info:
            decode_request(raw)
        assert exc_info.value.request_id == 7

    def test_missing_params(self):
        with pytest.raises(DecodeError, match="Missing params") as exc_info:
            decode_request(b'{"id":4,"method":"m"}')
        assert exc_info.value.request_id == 4

    def test_params_must_be_array(self):
        with pytest.raises(DecodeError, match="array"):
            decode_request(b'{"id":4,"method":"m","params":{"height":1}}')

    def test_request_id_absent_when_id_invalid(self):
        with pytest.raises(DecodeError) as exc_info:
            decode_request(b'{"id":"x","method":"m","params":[]}')
        assert exc_info.value.request_id is None


class TestEncodeResponse:
    """Tests for encode_response."""

    def test_success_frame(self):
        frame = encode_response(Response.success(1, 84372))
        assert frame == b'{"id":1,"result":84372,"error":null}\n'

    def test_error_frame_nulls_result(self):
        frame = encode_response(Response(id=4, result="ignored", error="Unknown method"))
        assert json.loads(frame) == {"id": 4, "result": None, "error": "Unknown method"}

    def test_null_id(self):
        frame = encode_response(Response.failure(None, "Parse error: bad"))
        assert json.loads(frame)["id"] is None

    def test_single_line(self):
        frame = encode_response(Response.success(1, {"text": "a\nb"}))
        assert frame.count(b"\n") == 1
        assert frame.endswith(b"\n")

    def test_unserializable_result(self):
        with pytest.raises(EncodeError):
            encode_response(Response.success(1, object()))

    def test_nan_is_not_representable(self):
        with pytest.raises(EncodeError):
            encode_response(Response.success(1, math.nan))


class TestClientSide:
    """Tests for the request encoder and response decoder."""

    def test_encode_request(self):
        frame = encode_request(Request(id=9, method="getblockhash", params=[5]))
        assert frame == b'{"id":9,"method":"getblockhash","params":[5]}\n'

    def test_decode_response(self):
        response = decode_response(b'{"id":2,"result":"abc","error":null}\n')
        assert response == Response(id=2, result="abc", error=None)

    def test_decode_response_rejects_non_string_error(self):
        with pytest.raises(DecodeError):
            decode_response(b'{"id":2,"result":null,"error":{"code":1}}')
