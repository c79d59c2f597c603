import ctypes
from pathlib import Path

import pytest

from citadel_bridge.bridge import ResponseBridge
from citadel_bridge.config import BridgeConfig, ConfigurationError
from citadel_bridge.errors import CitadelError, ParseStatus
from citadel_bridge.ffi import CtypesForeignLayer, ForeignResult, Outcome, _StringResult


def test_success_envelope_cannot_carry_error() -> None:
    with pytest.raises(ValueError):
        ForeignResult(Outcome.SUCCESS, payload=1, error="boom")


def test_failure_envelope_cannot_carry_payload() -> None:
    with pytest.raises(ValueError):
        ForeignResult(Outcome.FAILURE, payload=1)


def test_envelope_helpers() -> None:
    assert ForeignResult.success(5).is_success
    failed = ForeignResult.failure("bad", code=3)
    assert not failed.is_success
    assert (failed.error, failed.code) == ("bad", 3)


def test_missing_library_raises_configuration_error(tmp_path: Path) -> None:
    config = BridgeConfig(library_path=tmp_path / "libmissing.so")

    with pytest.raises(ConfigurationError) as excinfo:
        CtypesForeignLayer.from_config(config)

    assert "libmissing.so" in str(excinfo.value)


class StubLibrary:
    """Records ownership calls the ctypes layer makes into the native core."""

    def __init__(self, result: _StringResult) -> None:
        self.result = result
        self.destroyed: list[_StringResult] = []
        self.released: list[int] = []

    def lnpbp_address_parse(self, text: bytes) -> _StringResult:
        return self.result

    def result_destroy(self, result: _StringResult) -> None:
        self.destroyed.append(result)
        # Scribble over the error text as the native allocator would on free.
        if result.code != 0 and result.details.error:
            ctypes.memset(result.details.error, 0, 1)

    def release_string(self, handle: int) -> None:
        self.released.append(handle)


def _layer_with(result: _StringResult) -> tuple[CtypesForeignLayer, StubLibrary]:
    layer = object.__new__(CtypesForeignLayer)
    stub = StubLibrary(result)
    layer._lib = stub
    layer._owners = {}
    return layer, stub


def _string_result(code: int, buffer=None, *, error: bool = False) -> _StringResult:
    result = _StringResult(code=code)
    address = ctypes.addressof(buffer) if buffer is not None else None
    if error:
        result.details.error = address
    else:
        result.details.data = address
    return result


def test_struct_payload_is_destroyed_once_on_release() -> None:
    buffer = ctypes.create_string_buffer(b'{"address": "bc1q"}')
    layer, stub = _layer_with(_string_result(0, buffer))

    envelope = layer.address_parse("bc1q")

    assert envelope.is_success
    assert envelope.payload == ctypes.addressof(buffer)
    assert stub.destroyed == []
    assert ResponseBridge(layer).bridge(envelope) == '{"address": "bc1q"}'
    assert stub.destroyed == [stub.result]
    assert stub.released == []
    assert layer._owners == {}


def test_struct_success_without_data_is_destroyed_immediately() -> None:
    layer, stub = _layer_with(_string_result(0))

    envelope = layer.address_parse("bc1q")

    assert envelope == ForeignResult.success(None)
    assert stub.destroyed == [stub.result]
    assert layer._owners == {}


def test_struct_failure_copies_error_before_destroy() -> None:
    buffer = ctypes.create_string_buffer(b"invalid bech32 checksum")
    layer, stub = _layer_with(_string_result(2, buffer, error=True))

    envelope = layer.address_parse("bc1q")

    assert not envelope.is_success
    assert envelope.error == "invalid bech32 checksum"
    assert envelope.code == 2
    assert stub.destroyed == [stub.result]
    assert buffer.value == b""
    assert layer._owners == {}


def test_plain_string_handle_goes_to_release_string() -> None:
    buffer = ctypes.create_string_buffer(b"tb1qaddress")
    layer, stub = _layer_with(_string_result(0))
    handle = ctypes.addressof(buffer)

    assert ResponseBridge(layer).take_string(handle) == "tb1qaddress"
    assert stub.released == [handle]
    assert stub.destroyed == []


def test_non_utf8_struct_payload_is_corrupted_and_destroyed() -> None:
    buffer = ctypes.create_string_buffer(b"\xff\xfe")
    layer, stub = _layer_with(_string_result(0, buffer))

    with pytest.raises(CitadelError) as excinfo:
        ResponseBridge(layer).bridge(layer.address_parse("bc1q"))

    assert excinfo.value.kind is ParseStatus.INVALID_STRUCTURED_DATA
    assert stub.destroyed == [stub.result]
    assert layer._owners == {}
