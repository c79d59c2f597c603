"""Error taxonomy shared by the response bridge and the format classifier.

Three sources of failure end up in a single :class:`CitadelError`:

* the foreign core's own last-error mechanism (arbitrary code + message),
* local structural decoding of a payload that the core accepted,
* status codes returned by the core's generic encoding probe.

Numeric identity of :class:`ParseStatus` members is part of the wire contract
with the native library: values ``0``–``6`` are the library's status codes and
must never be renumbered.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Union

PROTOCOL_BROKEN_MESSAGE = "foreign API is broken: failure reported without error details"


class ParseStatus(IntEnum):
    """Status of a parse attempt, as reported by the native encoding probe."""

    OK = 0
    HRP_ERROR = 1
    CHECKSUM_ERROR = 2
    ENCODING_ERROR = 3
    PAYLOAD_ERROR = 4
    UNSUPPORTED_ERROR = 5
    INTERNAL_ERROR = 6
    # Local sentinel: the core accepted the encoding but the payload did not
    # match the expected structure. Never returned by the core itself.
    INVALID_STRUCTURED_DATA = 0xFFFF

    @classmethod
    def from_foreign(cls, code: int) -> "ParseStatus":
        """Map a status code returned by the core onto the enumeration."""

        if code == cls.INVALID_STRUCTURED_DATA or code not in cls._value2member_map_:
            raise ValueError(f"unexpected status code from foreign layer: {code}")
        return cls(code)


class ForeignKind(Enum):
    """Marker for errors surfaced verbatim from the core's last-error record."""

    FOREIGN = "foreign"


ErrorKind = Union[ParseStatus, ForeignKind]


class CitadelError(RuntimeError):
    """Structured error raised by the bridge and its callers."""

    def __init__(self, kind: ErrorKind, message: str, code: int | None = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        if code is None:
            code = kind.value if isinstance(kind, ParseStatus) else -1
        self.code = code

    def __str__(self) -> str:
        if self.kind is ForeignKind.FOREIGN:
            return f"citadel error {self.code}: {self.message}"
        return self.message

    def __repr__(self) -> str:
        return f"CitadelError(kind={self.kind!r}, code={self.code}, message={self.message!r})"

    @classmethod
    def foreign(cls, code: int, message: str) -> "CitadelError":
        return cls(ForeignKind.FOREIGN, message, code=code)

    @classmethod
    def invalid_data(cls, message: str) -> "CitadelError":
        return cls(ParseStatus.INVALID_STRUCTURED_DATA, message)

    @classmethod
    def from_status(cls, status: ParseStatus, message: str) -> "CitadelError":
        return cls(status, message)

    @classmethod
    def protocol_broken(cls) -> "CitadelError":
        """Failure signalled by the core with no retrievable error detail."""

        return cls(ParseStatus.INTERNAL_ERROR, PROTOCOL_BROKEN_MESSAGE)

    @property
    def is_protocol_violation(self) -> bool:
        return self.kind is ParseStatus.INTERNAL_ERROR and self.message == PROTOCOL_BROKEN_MESSAGE


@dataclass(frozen=True)
class ParseReport:
    """Status and human readable explanation of a failed classification."""

    status: ParseStatus
    message: str

    def as_error(self) -> CitadelError:
        return CitadelError.from_status(self.status, self.message)


_STATUS_HINTS: dict[ParseStatus, str] = {
    ParseStatus.HRP_ERROR: (
        "The human-readable prefix is not known to this build. Check that the string was produced "
        "for the same network and has not been truncated at the start."
    ),
    ParseStatus.CHECKSUM_ERROR: (
        "The checksum does not match. The string was probably mistyped or cut while copying; "
        "copy it again from the source."
    ),
    ParseStatus.ENCODING_ERROR: (
        "The text is not a valid encoded string. Mixed case and characters outside the encoding "
        "alphabet are rejected."
    ),
    ParseStatus.PAYLOAD_ERROR: "The encoding is valid but its payload could not be read.",
    ParseStatus.UNSUPPORTED_ERROR: "This kind of data is recognized but not supported yet.",
    ParseStatus.INVALID_STRUCTURED_DATA: (
        "The native library returned data of an unexpected shape. Make sure the native library "
        "version matches this package."
    ),
}


def format_error_hint(error: CitadelError | ParseReport | None) -> str | None:
    """Return a short remediation hint for common parse failures.

    Foreign errors and internal errors carry their own diagnostics and get no
    hint; callers should display the message itself.
    """

    if error is None:
        return None
    if isinstance(error, ParseReport):
        return _STATUS_HINTS.get(error.status)
    if isinstance(error.kind, ParseStatus):
        return _STATUS_HINTS.get(error.kind)
    return None
