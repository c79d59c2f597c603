"""Closed set of shapes an arbitrary input string can be classified as.

Each variant is a frozen dataclass carrying its own typed payload and a
``kind`` tag from :class:`DataKind`. Consumers switch on ``data.kind``; the set
of kinds is closed and every variant maps to exactly one kind.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, ClassVar, Union

from .errors import CitadelError, ParseReport, ParseStatus
from .models import AddressInfo, Asset, ConsignmentInfo, Invoice, OutPoint


class DataKind(str, Enum):
    UNKNOWN = "unknown"
    URL = "url"
    ADDRESS = "address"
    INVOICE = "invoice"
    RGB20_ASSET = "rgb20_asset"
    CONSIGNMENT = "consignment"
    SCHEMA_ID = "schema_id"
    CONTRACT_ID = "contract_id"
    LNPBP_ID = "lnpbp_id"
    HASH160 = "hash160"
    HEX256 = "hex256"
    PUBLIC_KEY = "public_key"
    HEX_UNKNOWN = "hex_unknown"
    BASE58_UNKNOWN = "base58_unknown"
    BASE64_UNKNOWN = "base64_unknown"
    BECH32_UNKNOWN = "bech32_unknown"
    SCRIPT = "script"
    DESCRIPTOR = "descriptor"
    DERIVATION = "derivation"
    TRANSACTION = "transaction"
    PSBT = "psbt"
    OUTPOINT = "outpoint"
    GENESIS = "genesis"


@dataclass(frozen=True)
class Unknown:
    kind: ClassVar[DataKind] = DataKind.UNKNOWN


@dataclass(frozen=True)
class Url:
    kind: ClassVar[DataKind] = DataKind.URL
    url: str


@dataclass(frozen=True)
class Address:
    kind: ClassVar[DataKind] = DataKind.ADDRESS
    info: AddressInfo


@dataclass(frozen=True)
class EncodedInvoice:
    kind: ClassVar[DataKind] = DataKind.INVOICE
    invoice: Invoice


@dataclass(frozen=True)
class Rgb20Asset:
    kind: ClassVar[DataKind] = DataKind.RGB20_ASSET
    asset: Asset


@dataclass(frozen=True)
class Consignment:
    kind: ClassVar[DataKind] = DataKind.CONSIGNMENT
    info: ConsignmentInfo


@dataclass(frozen=True)
class SchemaId:
    kind: ClassVar[DataKind] = DataKind.SCHEMA_ID
    id: str


@dataclass(frozen=True)
class ContractId:
    kind: ClassVar[DataKind] = DataKind.CONTRACT_ID
    id: str


@dataclass(frozen=True)
class LnpbpId:
    kind: ClassVar[DataKind] = DataKind.LNPBP_ID
    id: str


@dataclass(frozen=True)
class Hash160:
    kind: ClassVar[DataKind] = DataKind.HASH160
    digest: bytes


@dataclass(frozen=True)
class Hex256:
    kind: ClassVar[DataKind] = DataKind.HEX256
    digest: bytes


@dataclass(frozen=True)
class PublicKey:
    kind: ClassVar[DataKind] = DataKind.PUBLIC_KEY
    key: bytes

    @property
    def compressed(self) -> bool:
        return len(self.key) == 33


@dataclass(frozen=True)
class HexUnknown:
    kind: ClassVar[DataKind] = DataKind.HEX_UNKNOWN
    data: bytes


@dataclass(frozen=True)
class Base58Unknown:
    kind: ClassVar[DataKind] = DataKind.BASE58_UNKNOWN
    data: bytes


@dataclass(frozen=True)
class Base64Unknown:
    kind: ClassVar[DataKind] = DataKind.BASE64_UNKNOWN
    data: bytes


@dataclass(frozen=True)
class Bech32Unknown:
    kind: ClassVar[DataKind] = DataKind.BECH32_UNKNOWN
    hrp: str
    payload: str
    data: bytes


@dataclass(frozen=True)
class Script:
    kind: ClassVar[DataKind] = DataKind.SCRIPT
    value: str


@dataclass(frozen=True)
class Descriptor:
    kind: ClassVar[DataKind] = DataKind.DESCRIPTOR
    value: str


@dataclass(frozen=True)
class Derivation:
    kind: ClassVar[DataKind] = DataKind.DERIVATION
    value: str


@dataclass(frozen=True)
class Transaction:
    kind: ClassVar[DataKind] = DataKind.TRANSACTION
    raw: bytes


@dataclass(frozen=True)
class Psbt:
    kind: ClassVar[DataKind] = DataKind.PSBT
    raw: bytes


@dataclass(frozen=True)
class Outpoint:
    kind: ClassVar[DataKind] = DataKind.OUTPOINT
    outpoint: OutPoint


@dataclass(frozen=True)
class Genesis:
    """Chain genesis; ``network`` is the chain it identifies."""

    kind: ClassVar[DataKind] = DataKind.GENESIS
    network: str


ClassifiedData = Union[
    Unknown,
    Url,
    Address,
    EncodedInvoice,
    Rgb20Asset,
    Consignment,
    SchemaId,
    ContractId,
    LnpbpId,
    Hash160,
    Hex256,
    PublicKey,
    HexUnknown,
    Base58Unknown,
    Base64Unknown,
    Bech32Unknown,
    Script,
    Descriptor,
    Derivation,
    Transaction,
    Psbt,
    Outpoint,
    Genesis,
]

UNKNOWN = Unknown()


def _payload_to_dict(data: ClassifiedData) -> dict[str, Any]:
    payload: dict[str, Any] = {}
    for field in fields(data):
        name = field.name
        value = getattr(data, name)
        if isinstance(value, bytes):
            payload[name] = value.hex()
        elif hasattr(value, "model_dump"):
            payload[name] = value.model_dump(by_alias=True)
        else:
            payload[name] = value
    return payload


@dataclass(frozen=True)
class ClassificationResult:
    """Outcome of classifying one input string."""

    status: ParseStatus
    report: str
    data: ClassifiedData = UNKNOWN

    @property
    def is_ok(self) -> bool:
        return self.status is ParseStatus.OK

    @property
    def kind(self) -> DataKind:
        return self.data.kind

    @property
    def error(self) -> ParseReport | None:
        if self.is_ok:
            return None
        return ParseReport(self.status, self.report)

    def raise_for_status(self) -> None:
        if not self.is_ok:
            raise CitadelError.from_status(self.status, self.report)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.name.lower(),
            "code": int(self.status),
            "report": self.report,
            "kind": self.data.kind.value,
            "data": _payload_to_dict(self.data),
        }
