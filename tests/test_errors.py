import pytest

from citadel_bridge.errors import (
    CitadelError,
    ForeignKind,
    ParseReport,
    ParseStatus,
    format_error_hint,
)


def test_parse_status_wire_values_are_stable() -> None:
    assert [int(status) for status in ParseStatus] == [0, 1, 2, 3, 4, 5, 6, 0xFFFF]


@pytest.mark.parametrize("code", range(0, 7))
def test_from_foreign_maps_codes_verbatim(code) -> None:
    assert int(ParseStatus.from_foreign(code)) == code


@pytest.mark.parametrize("code", [7, -1, 0xFFFF])
def test_from_foreign_rejects_unknown_and_local_codes(code) -> None:
    with pytest.raises(ValueError):
        ParseStatus.from_foreign(code)


def test_error_constructors() -> None:
    foreign = CitadelError.foreign(17, "no such contract")
    invalid = CitadelError.invalid_data("bad shape")
    status = CitadelError.from_status(ParseStatus.CHECKSUM_ERROR, "bad checksum")
    broken = CitadelError.protocol_broken()

    assert foreign.kind is ForeignKind.FOREIGN and foreign.code == 17
    assert invalid.kind is ParseStatus.INVALID_STRUCTURED_DATA and invalid.code == 0xFFFF
    assert status.code == 2 and str(status) == "bad checksum"
    assert broken.is_protocol_violation
    assert not CitadelError.from_status(ParseStatus.INTERNAL_ERROR, "other").is_protocol_violation


def test_parse_report_round_trips_to_error() -> None:
    report = ParseReport(ParseStatus.HRP_ERROR, "unknown prefix")

    error = report.as_error()

    assert error.kind is ParseStatus.HRP_ERROR
    assert error.message == "unknown prefix"


def test_format_error_hint() -> None:
    assert "checksum" in format_error_hint(ParseReport(ParseStatus.CHECKSUM_ERROR, "x")).lower()
    assert format_error_hint(CitadelError.invalid_data("x")) is not None
    assert format_error_hint(CitadelError.foreign(3, "x")) is None
    assert format_error_hint(None) is None
