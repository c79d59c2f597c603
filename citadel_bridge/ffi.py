"""Foreign call boundary of the native citadel core.

The native library exposes a narrow C API: a handful of parsing entry points
returning ``string_result_t`` structs, wallet entry points returning plain
nullable ``char*`` strings owned by the caller, a dual-buffer
``prepared_transfer_t`` for payments, and a last-error slot attached to the
client handle. This module describes those shapes as small Python envelopes and
provides :class:`CtypesForeignLayer`, which loads the library with :mod:`ctypes`
and converts raw results into envelopes.

Nothing in this module reads a payload buffer on behalf of callers; copying and
releasing is the job of :mod:`citadel_bridge.bridge`.
"""

from __future__ import annotations

import ctypes
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Hashable, Optional, Protocol

from .config import BridgeConfig, ConfigurationError
from .errors import CitadelError

logger = logging.getLogger(__name__)

BufferHandle = Hashable


class Outcome(Enum):
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class ForeignResult:
    """Outcome of a single foreign call.

    ``payload`` is a foreign-owned buffer handle that the receiver must release
    exactly once; ``error`` is an error detail already copied out of foreign
    memory. At most one of them is populated.
    """

    outcome: Outcome
    payload: Optional[BufferHandle] = None
    error: Optional[str] = None
    code: int = 0

    def __post_init__(self) -> None:
        if self.outcome is Outcome.SUCCESS and self.error is not None:
            raise ValueError("successful foreign result cannot carry an error payload")
        if self.outcome is Outcome.FAILURE and self.payload is not None:
            raise ValueError("failed foreign result cannot carry a data payload")

    @property
    def is_success(self) -> bool:
        return self.outcome is Outcome.SUCCESS

    @classmethod
    def success(cls, payload: Optional[BufferHandle]) -> "ForeignResult":
        return cls(Outcome.SUCCESS, payload=payload)

    @classmethod
    def failure(cls, error: Optional[str] = None, code: int = 0) -> "ForeignResult":
        return cls(Outcome.FAILURE, error=error, code=code)


@dataclass(frozen=True)
class TransferResult:
    """Dual-buffer result: a primary payload and an optional secondary one."""

    success: bool
    primary: Optional[BufferHandle] = None
    secondary: Optional[BufferHandle] = None


@dataclass(frozen=True)
class Bech32Info:
    """Triple returned by the generic encoding probe."""

    status: int
    category: int
    details: Optional[BufferHandle]


@dataclass(frozen=True)
class LastError:
    has_error: bool
    code: int = 0
    message: str = ""


class ForeignLayer(Protocol):
    """Entry points the bridge and the classifier consume."""

    def read_string(self, handle: BufferHandle) -> str:
        """Copy a NUL-terminated foreign string into a Python ``str``."""

    def release_string(self, handle: BufferHandle) -> None:
        """Return ownership of ``handle`` to the foreign allocator."""

    def last_error(self, context: Any) -> LastError:
        """Read the last-error slot of ``context``."""

    def address_parse(self, text: str) -> ForeignResult:
        ...

    def descriptor_parse(self, descriptor: str) -> ForeignResult:
        ...

    def bech32_info(self, text: str) -> Bech32Info:
        ...

    def invoke(self, entry_point: str, context: Any, *args: Any) -> ForeignResult:
        """Call a wallet entry point returning a nullable owned string."""

    def invoke_transfer(self, entry_point: str, context: Any, *args: Any) -> TransferResult:
        """Call a wallet entry point returning a dual-buffer transfer."""


# --------------------------------------------------------------------------
# ctypes implementation
# --------------------------------------------------------------------------


class _ResultDetails(ctypes.Union):
    _fields_ = [("data", ctypes.c_void_p), ("error", ctypes.c_void_p)]


class _StringResult(ctypes.Structure):
    _fields_ = [("code", ctypes.c_int), ("details", _ResultDetails)]


class _Bech32Info(ctypes.Structure):
    _fields_ = [
        ("status", ctypes.c_int),
        ("category", ctypes.c_int),
        ("details", ctypes.c_void_p),
    ]


class _PreparedTransfer(ctypes.Structure):
    _fields_ = [
        ("success", ctypes.c_bool),
        ("psbt_base64", ctypes.c_void_p),
        ("consignment_bech32", ctypes.c_void_p),
    ]


class _Client(ctypes.Structure):
    _fields_ = [
        ("message", ctypes.c_void_p),
        ("err_no", ctypes.c_int),
        ("inner", ctypes.c_void_p),
    ]


_ClientPtr = ctypes.POINTER(_Client)

# Argument types after the leading client handle.
_POINTER_CALLS: dict[str, list[Any]] = {
    "citadel_single_sig_create": [ctypes.c_char_p, ctypes.c_char_p, ctypes.c_int],
    "citadel_contract_list": [],
    "citadel_contract_operations": [ctypes.c_char_p],
    "citadel_contract_balance": [ctypes.c_char_p, ctypes.c_bool, ctypes.c_uint8],
    "citadel_asset_list": [],
    "citadel_asset_import": [ctypes.c_char_p],
    "citadel_address_create": [ctypes.c_char_p, ctypes.c_bool, ctypes.c_bool],
    "citadel_address_list": [ctypes.c_char_p, ctypes.c_bool, ctypes.c_uint8],
    "citadel_invoice_create": [
        ctypes.c_int,
        ctypes.c_char_p,
        ctypes.c_char_p,
        ctypes.c_uint64,
        ctypes.c_char_p,
        ctypes.c_char_p,
        ctypes.c_bool,
        ctypes.c_bool,
    ],
    "citadel_psbt_publish": [ctypes.c_char_p],
    "citadel_invoice_accept": [ctypes.c_char_p],
}

_TRANSFER_CALLS: dict[str, list[Any]] = {
    "citadel_invoice_pay": [
        ctypes.c_char_p,
        ctypes.c_char_p,
        ctypes.c_uint64,
        ctypes.c_uint64,
        ctypes.c_uint64,
    ],
}


def _encode_arg(value: Any) -> Any:
    if isinstance(value, str):
        return value.encode("utf-8")
    return value


class CtypesForeignLayer:
    """Native citadel core loaded through :mod:`ctypes`."""

    def __init__(self, library_path: str | Path) -> None:
        self.library_path = Path(library_path)
        try:
            self._lib = ctypes.CDLL(str(self.library_path))
        except OSError as exc:
            logger.error(
                "Failed to load native library %s: %s",
                self.library_path,
                exc,
                exc_info=logger.isEnabledFor(logging.DEBUG),
            )
            raise ConfigurationError(
                f"Unable to load native citadel library from {self.library_path}; "
                "set CITADEL_LIB_PATH or bridge.library_path in ~/.citadel.yaml"
            ) from exc
        # Struct results whose payload buffer is still owned by the caller.
        self._owners: dict[int, _StringResult] = {}
        self._declare()
        logger.info("Native citadel library loaded from %s", self.library_path)

    @classmethod
    def from_config(cls, config: BridgeConfig) -> "CtypesForeignLayer":
        return cls(config.library_path)

    def _declare(self) -> None:
        lib = self._lib

        lib.release_string.restype = None
        lib.release_string.argtypes = [ctypes.c_void_p]

        lib.result_destroy.restype = None
        lib.result_destroy.argtypes = [_StringResult]

        lib.lnpbp_address_parse.restype = _StringResult
        lib.lnpbp_address_parse.argtypes = [ctypes.c_char_p]

        lib.lnpbp_descriptor_parse.restype = _StringResult
        lib.lnpbp_descriptor_parse.argtypes = [ctypes.c_char_p]

        lib.lnpbp_bech32_info.restype = _Bech32Info
        lib.lnpbp_bech32_info.argtypes = [ctypes.c_char_p]

        lib.citadel_has_err.restype = ctypes.c_bool
        lib.citadel_has_err.argtypes = [_ClientPtr]

        lib.mycitadel_run_embedded.restype = _ClientPtr
        lib.mycitadel_run_embedded.argtypes = [ctypes.c_char_p, ctypes.c_char_p, ctypes.c_char_p]

        for name, argtypes in _POINTER_CALLS.items():
            func = getattr(lib, name)
            func.restype = ctypes.c_void_p
            func.argtypes = [_ClientPtr, *argtypes]

        for name, argtypes in _TRANSFER_CALLS.items():
            func = getattr(lib, name)
            func.restype = _PreparedTransfer
            func.argtypes = [_ClientPtr, *argtypes]

    # Context ---------------------------------------------------------------

    def start_embedded(self, network: str, data_dir: str | Path, electrum_server: str) -> Any:
        """Start the embedded runtime and return its client handle."""

        client = self._lib.mycitadel_run_embedded(
            network.encode("utf-8"),
            str(data_dir).encode("utf-8"),
            electrum_server.encode("utf-8"),
        )
        if not client:
            raise CitadelError.foreign(-1, f"unable to start embedded citadel runtime for {network}")
        return client

    def last_error(self, context: Any) -> LastError:
        if not self._lib.citadel_has_err(context):
            return LastError(has_error=False)
        client = context.contents
        message = ctypes.string_at(client.message).decode("utf-8", "replace") if client.message else ""
        return LastError(has_error=True, code=int(client.err_no), message=message)

    # Buffers ---------------------------------------------------------------

    def read_string(self, handle: BufferHandle) -> str:
        return ctypes.string_at(handle).decode("utf-8")

    def release_string(self, handle: BufferHandle) -> None:
        owner = self._owners.pop(handle, None)
        if owner is not None:
            self._lib.result_destroy(owner)
        else:
            self._lib.release_string(handle)

    # Parsing entry points --------------------------------------------------

    def _from_string_result(self, result: _StringResult) -> ForeignResult:
        if result.code == 0:
            handle = result.details.data
            if not handle:
                self._lib.result_destroy(result)
                return ForeignResult.success(None)
            self._owners[handle] = result
            return ForeignResult.success(handle)
        error = None
        if result.details.error:
            error = ctypes.string_at(result.details.error).decode("utf-8", "replace")
        self._lib.result_destroy(result)
        return ForeignResult.failure(error, code=int(result.code))

    def address_parse(self, text: str) -> ForeignResult:
        return self._from_string_result(self._lib.lnpbp_address_parse(text.encode("utf-8")))

    def descriptor_parse(self, descriptor: str) -> ForeignResult:
        return self._from_string_result(self._lib.lnpbp_descriptor_parse(descriptor.encode("utf-8")))

    def bech32_info(self, text: str) -> Bech32Info:
        info = self._lib.lnpbp_bech32_info(text.encode("utf-8"))
        return Bech32Info(
            status=int(info.status),
            category=int(info.category),
            details=info.details or None,
        )

    # Wallet entry points ---------------------------------------------------

    def invoke(self, entry_point: str, context: Any, *args: Any) -> ForeignResult:
        if entry_point not in _POINTER_CALLS:
            raise ValueError(f"unknown foreign entry point: {entry_point}")
        logger.debug("Foreign call %s", entry_point)
        pointer = getattr(self._lib, entry_point)(context, *(_encode_arg(arg) for arg in args))
        if not pointer:
            return ForeignResult.failure()
        return ForeignResult.success(pointer)

    def invoke_transfer(self, entry_point: str, context: Any, *args: Any) -> TransferResult:
        if entry_point not in _TRANSFER_CALLS:
            raise ValueError(f"unknown foreign transfer entry point: {entry_point}")
        logger.debug("Foreign transfer call %s", entry_point)
        transfer = getattr(self._lib, entry_point)(context, *(_encode_arg(arg) for arg in args))
        return TransferResult(
            success=bool(transfer.success),
            primary=transfer.psbt_base64 or None,
            secondary=transfer.consignment_bech32 or None,
        )
