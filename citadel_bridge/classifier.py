"""Universal format classifier for user-supplied text.

Input is tried against an ordered list of probes. A probe returns a
:class:`ClassificationResult` when it recognizes the input and ``None`` when it
does not; the first result wins and later probes never run. Address parsing
comes first: address formats share prefix space with generic bech32 payloads,
and an input valid under both readings is always an address.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional

from .bridge import ResponseBridge
from .categories import DecoderRegistry, default_registry, describe_category
from .classified import UNKNOWN, Address, ClassificationResult
from .errors import CitadelError, ParseStatus
from .ffi import ForeignLayer
from .models import AddressInfo

logger = logging.getLogger(__name__)

Probe = Callable[[str], Optional[ClassificationResult]]

ADDRESS_REPORT = "Address parsed successfully"
BECH32_REPORT = "Bech32 string parsed successfully"
NOT_RECOGNIZED_REPORT = "Input was not recognized by any parser"


class UniversalClassifier:
    """Resolve arbitrary text to exactly one :mod:`~citadel_bridge.classified` variant.

    ``probes`` replaces the default ``[address, encoding]`` chain; callers that
    want to extend it should append to :meth:`default_probes` so existing
    probes keep their order.
    """

    def __init__(
        self,
        layer: ForeignLayer,
        registry: DecoderRegistry | None = None,
        probes: Iterable[Probe] | None = None,
    ) -> None:
        self.layer = layer
        self.bridge = ResponseBridge(layer)
        self.registry = registry if registry is not None else default_registry()
        self.probes: list[Probe] = list(probes) if probes is not None else self.default_probes()

    def default_probes(self) -> list[Probe]:
        return [self.probe_address, self.probe_encoding]

    def classify(self, text: str) -> ClassificationResult:
        failure: Exception | None = None
        for probe in self.probes:
            try:
                result = probe(text)
            except CitadelError as exc:
                if exc.is_protocol_violation:
                    raise
                failure = exc
                continue
            except Exception as exc:
                logger.warning(
                    "Probe %s raised %s",
                    getattr(probe, "__name__", probe),
                    type(exc).__name__,
                    exc_info=logger.isEnabledFor(logging.DEBUG),
                )
                failure = exc
                continue
            if result is not None:
                return result

        if failure is None:
            return ClassificationResult(ParseStatus.INVALID_STRUCTURED_DATA, NOT_RECOGNIZED_REPORT, UNKNOWN)
        return ClassificationResult(
            ParseStatus.INVALID_STRUCTURED_DATA,
            f"Internal error: unexpected {type(failure).__name__}: {failure}",
            UNKNOWN,
        )

    def probe_address(self, text: str) -> ClassificationResult | None:
        try:
            info = self.bridge.bridge_to_bytes(self.layer.address_parse(text), AddressInfo)
        except CitadelError as exc:
            logger.debug("Not an address: %s", exc)
            return None
        logger.debug("Parsed address %s on %s", info.address, info.network)
        return ClassificationResult(ParseStatus.OK, ADDRESS_REPORT, Address(info))

    def probe_encoding(self, text: str) -> ClassificationResult:
        info = self.layer.bech32_info(text)
        details = self.bridge.take_string(info.details) if info.details is not None else ""
        logger.debug("Bech32 probe status=%d category=%s", info.status, describe_category(info.category))

        status = ParseStatus.from_foreign(info.status)
        if status is not ParseStatus.OK:
            return ClassificationResult(status, details, UNKNOWN)

        decoder = self.registry.get(info.category)
        if decoder is None:
            return ClassificationResult(
                ParseStatus.OK,
                f"Bech32 category {describe_category(info.category)} is not recognized",
                UNKNOWN,
            )
        try:
            data = decoder(details)
        except CitadelError as exc:
            if exc.kind is not ParseStatus.INVALID_STRUCTURED_DATA:
                raise
            logger.debug("Category %s payload rejected: %s", describe_category(info.category), exc.message)
            return ClassificationResult(ParseStatus.INVALID_STRUCTURED_DATA, exc.message, UNKNOWN)
        return ClassificationResult(ParseStatus.OK, BECH32_REPORT, data)


def classify(text: str, layer: ForeignLayer, registry: DecoderRegistry | None = None) -> ClassificationResult:
    """Classify ``text`` with a one-off :class:`UniversalClassifier`."""

    return UniversalClassifier(layer, registry=registry).classify(text)
