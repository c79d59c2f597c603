"""Category tags of the generic encoding probe and their decoders.

The native ``lnpbp_bech32_info`` call reports which kind of object a string
encodes through a numeric category tag. A :class:`DecoderRegistry` maps tags to
decoders that turn the JSON ``details`` of the probe into a typed
:mod:`citadel_bridge.classified` variant. Tags without a decoder are not
errors; the classifier reports them as unknown data.
"""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import Callable, Iterator

from cryptography.hazmat.primitives.asymmetric import ec

from .classified import (
    Base58Unknown,
    Base64Unknown,
    Bech32Unknown,
    ClassifiedData,
    Consignment,
    ContractId,
    Derivation,
    Descriptor,
    EncodedInvoice,
    Genesis,
    Hash160,
    Hex256,
    HexUnknown,
    LnpbpId,
    Outpoint,
    Psbt,
    PublicKey,
    Rgb20Asset,
    SchemaId,
    Script,
    Transaction,
    Url,
)
from .config import SUPPORTED_NETWORKS
from .errors import CitadelError
from .models import Asset, Bech32Payload, ConsignmentInfo, EncodedBlob, Identifier, Invoice, OutPoint, TextPayload
from .structured import REPORT_PREFIX, decode_structured

logger = logging.getLogger(__name__)


class Category(IntEnum):
    UNKNOWN = 0x0000
    URL = 0x0001
    BC_ADDRESS = 0x0100
    LN_BOLT11 = 0x0200
    LNPBP_ID = 0x0300
    LNPBP_DATA = 0x0301
    LNPBP_ZDATA = 0x0302
    LNPBP_INVOICE = 0x0310
    RGB_SCHEMA_ID = 0x0400
    RGB_CONTRACT_ID = 0x0401
    RGB_SCHEMA = 0x0410
    RGB_GENESIS = 0x0411
    RGB_CONSIGNMENT = 0x0420
    RGB20_ASSET = 0x0430
    # Non-bech32 payloads recognized by newer builds of the core.
    SCRIPT = 0x0500
    DESCRIPTOR = 0x0501
    DERIVATION = 0x0502
    TRANSACTION = 0x0600
    PSBT = 0x0601
    HEX = 0x0700
    BASE58 = 0x0701
    BASE64 = 0x0702
    OUTPOINT = 0x0800
    GENESIS = 0x0801


CategoryDecoder = Callable[[str], ClassifiedData]


def describe_category(tag: int) -> str:
    try:
        return f"{Category(tag).name} (0x{tag:04x})"
    except ValueError:
        return f"0x{tag:04x}"


def _blob_bytes(details: str) -> bytes:
    blob = decode_structured(details, EncodedBlob)
    try:
        return bytes.fromhex(blob.data)
    except ValueError as exc:
        raise CitadelError.invalid_data(REPORT_PREFIX + "data corrupted at `\\.data`") from exc


def _is_secp256k1_point(data: bytes) -> bool:
    try:
        ec.EllipticCurvePublicKey.from_encoded_point(ec.SECP256K1(), data)
    except ValueError:
        return False
    return True


def decode_asset(details: str) -> ClassifiedData:
    return Rgb20Asset(decode_structured(details, Asset))


def decode_invoice(details: str) -> ClassifiedData:
    return EncodedInvoice(decode_structured(details, Invoice))


def decode_consignment(details: str) -> ClassifiedData:
    return Consignment(decode_structured(details, ConsignmentInfo))


def decode_schema_id(details: str) -> ClassifiedData:
    return SchemaId(decode_structured(details, Identifier).id)


def decode_contract_id(details: str) -> ClassifiedData:
    return ContractId(decode_structured(details, Identifier).id)


def decode_lnpbp_id(details: str) -> ClassifiedData:
    return LnpbpId(decode_structured(details, Identifier).id)


def decode_url(details: str) -> ClassifiedData:
    return Url(decode_structured(details, TextPayload).value)


def decode_bech32_unknown(details: str) -> ClassifiedData:
    payload = decode_structured(details, Bech32Payload)
    try:
        data = bytes.fromhex(payload.data)
    except ValueError as exc:
        raise CitadelError.invalid_data(REPORT_PREFIX + "data corrupted at `\\.data`") from exc
    return Bech32Unknown(hrp=payload.hrp, payload=payload.payload, data=data)


def decode_hex(details: str) -> ClassifiedData:
    """Classify raw hex by length: hashes, public keys, or opaque bytes."""

    data = _blob_bytes(details)
    if len(data) == 20:
        return Hash160(data)
    if len(data) == 32:
        return Hex256(data)
    if len(data) in (33, 65) and _is_secp256k1_point(data):
        return PublicKey(data)
    return HexUnknown(data)


def decode_base58(details: str) -> ClassifiedData:
    return Base58Unknown(_blob_bytes(details))


def decode_base64(details: str) -> ClassifiedData:
    return Base64Unknown(_blob_bytes(details))


def decode_transaction(details: str) -> ClassifiedData:
    return Transaction(_blob_bytes(details))


def decode_psbt(details: str) -> ClassifiedData:
    return Psbt(_blob_bytes(details))


def decode_script(details: str) -> ClassifiedData:
    return Script(decode_structured(details, TextPayload).value)


def decode_descriptor(details: str) -> ClassifiedData:
    return Descriptor(decode_structured(details, TextPayload).value)


def decode_derivation(details: str) -> ClassifiedData:
    return Derivation(decode_structured(details, TextPayload).value)


def decode_outpoint(details: str) -> ClassifiedData:
    return Outpoint(decode_structured(details, OutPoint))


def decode_genesis(details: str) -> ClassifiedData:
    network = decode_structured(details, TextPayload).value.lower()
    if network not in SUPPORTED_NETWORKS:
        raise CitadelError.invalid_data(REPORT_PREFIX + "data corrupted at `\\.value`")
    return Genesis(network)


class DecoderRegistry:
    """Ordered mapping of category tags to decoders."""

    def __init__(self) -> None:
        self._decoders: dict[int, CategoryDecoder] = {}

    def register(self, tag: int, decoder: CategoryDecoder, *, replace: bool = False) -> None:
        tag = int(tag)
        if tag in self._decoders and not replace:
            raise ValueError(f"a decoder is already registered for category {describe_category(tag)}")
        self._decoders[tag] = decoder
        logger.debug("Registered decoder %s for category %s", getattr(decoder, "__name__", decoder), describe_category(tag))

    def unregister(self, tag: int) -> None:
        self._decoders.pop(int(tag), None)

    def get(self, tag: int) -> CategoryDecoder | None:
        return self._decoders.get(int(tag))

    def __contains__(self, tag: object) -> bool:
        return isinstance(tag, int) and tag in self._decoders

    def __iter__(self) -> Iterator[int]:
        return iter(self._decoders)

    def __len__(self) -> int:
        return len(self._decoders)

    def copy(self) -> "DecoderRegistry":
        clone = DecoderRegistry()
        clone._decoders = dict(self._decoders)
        return clone


_DEFAULT_DECODERS: tuple[tuple[Category, CategoryDecoder], ...] = (
    (Category.RGB20_ASSET, decode_asset),
    (Category.LNPBP_INVOICE, decode_invoice),
    (Category.RGB_CONSIGNMENT, decode_consignment),
    (Category.RGB_SCHEMA_ID, decode_schema_id),
    (Category.RGB_CONTRACT_ID, decode_contract_id),
    (Category.LNPBP_ID, decode_lnpbp_id),
    (Category.UNKNOWN, decode_bech32_unknown),
    (Category.URL, decode_url),
    (Category.SCRIPT, decode_script),
    (Category.DESCRIPTOR, decode_descriptor),
    (Category.DERIVATION, decode_derivation),
    (Category.TRANSACTION, decode_transaction),
    (Category.PSBT, decode_psbt),
    (Category.HEX, decode_hex),
    (Category.BASE58, decode_base58),
    (Category.BASE64, decode_base64),
    (Category.OUTPOINT, decode_outpoint),
    (Category.GENESIS, decode_genesis),
)


def default_registry() -> DecoderRegistry:
    registry = DecoderRegistry()
    for tag, decoder in _DEFAULT_DECODERS:
        registry.register(tag, decoder)
    return registry
