"""Response bridge: turns foreign call results into owned Python values.

Every buffer allocated by the native core is wrapped in an :class:`OwnedBuffer`
as soon as it crosses the boundary. The wrapper is the only object allowed to
read or release the buffer, releases it at most once, and releases it on every
exit path of the ``with`` block that owns it.

The last-error slot of the client handle is process-wide state: it is read
immediately after a failure is detected and before any other foreign call.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, TypeVar

from .errors import CitadelError
from .ffi import BufferHandle, ForeignLayer, ForeignResult, TransferResult
from .structured import REPORT_PREFIX, decode_structured

logger = logging.getLogger(__name__)

T = TypeVar("T")


class OwnedBuffer:
    """Single-owner handle of a foreign-allocated string buffer."""

    __slots__ = ("_layer", "_handle", "_released")

    def __init__(self, layer: ForeignLayer, handle: Optional[BufferHandle]) -> None:
        self._layer = layer
        self._handle = handle
        self._released = False

    def __copy__(self) -> "OwnedBuffer":
        raise TypeError("OwnedBuffer cannot be copied")

    def __deepcopy__(self, memo: dict) -> "OwnedBuffer":
        raise TypeError("OwnedBuffer cannot be copied")

    def __enter__(self) -> "OwnedBuffer":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.release()

    @property
    def is_null(self) -> bool:
        return self._handle is None

    @property
    def released(self) -> bool:
        return self._released

    def read(self) -> str:
        if self._released:
            raise RuntimeError("foreign buffer read after release")
        if self._handle is None:
            raise RuntimeError("foreign buffer is null")
        try:
            return self._layer.read_string(self._handle)
        except UnicodeDecodeError as exc:
            logger.error("Foreign buffer is not valid UTF-8: %s", exc)
            raise CitadelError.invalid_data(REPORT_PREFIX + "data corrupted at `self`") from exc

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        if self._handle is not None:
            self._layer.release_string(self._handle)
        self._handle = None

    def take(self) -> str:
        """Copy the contents and release the buffer."""

        with self:
            return self.read()


class ResponseBridge:
    """Convert foreign envelopes into owned strings or :class:`CitadelError`.

    ``context`` is the client handle whose last-error slot is consulted when a
    call fails without an inline error payload. Parsing entry points that do
    not take a client handle report their errors inline and work with
    ``context=None``.
    """

    def __init__(self, layer: ForeignLayer, context: Any = None) -> None:
        self.layer = layer
        self.context = context

    def last_error(self) -> CitadelError | None:
        record = self.layer.last_error(self.context)
        if not record.has_error:
            return None
        return CitadelError.foreign(record.code, record.message)

    def _failure(self, result: ForeignResult | None = None) -> CitadelError:
        if result is not None and result.error is not None:
            return CitadelError.foreign(result.code, result.error)
        if self.context is not None:
            error = self.last_error()
            if error is not None:
                return error
        logger.error("Foreign call signalled failure without error details")
        return CitadelError.protocol_broken()

    def take_string(self, handle: Optional[BufferHandle]) -> str:
        """Copy and release a bare buffer handle."""

        if handle is None:
            logger.error("Foreign call returned a null buffer where data was expected")
            raise CitadelError.protocol_broken()
        return OwnedBuffer(self.layer, handle).take()

    def bridge(self, result: ForeignResult) -> str:
        """Return the payload of ``result`` as an owned string."""

        if not result.is_success:
            raise self._failure(result)
        if result.payload is None:
            logger.error("Foreign call reported success with a null payload")
            raise CitadelError.protocol_broken()
        text = OwnedBuffer(self.layer, result.payload).take()
        logger.debug("Bridged foreign payload (%d chars)", len(text))
        return text

    def bridge_to_bytes(self, result: ForeignResult, model: type[T] | Any) -> T:
        """Bridge ``result`` and decode its JSON payload as ``model``."""

        data = self.bridge(result).encode("utf-8")
        return decode_structured(data, model)

    def bridge_pair(self, result: TransferResult) -> tuple[str, str | None]:
        """Bridge a dual-buffer result into ``(primary, secondary)``."""

        if not result.success:
            raise self._failure()
        with OwnedBuffer(self.layer, result.primary) as primary, OwnedBuffer(
            self.layer, result.secondary
        ) as secondary:
            if primary.is_null:
                logger.error("Foreign transfer reported success without a primary payload")
                raise CitadelError.protocol_broken()
            primary_text = primary.read()
            secondary_text = None if secondary.is_null else secondary.read()
        logger.debug(
            "Bridged foreign transfer (primary %d chars, secondary %s)",
            len(primary_text),
            "absent" if secondary_text is None else f"{len(secondary_text)} chars",
        )
        return primary_text, secondary_text
