"""Wire models for JSON documents produced by the native core.

Field names follow Python conventions; the native core emits camelCase keys,
so every model validates by alias and also accepts the Python names.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class AddressInfo(WireModel):
    """Parsed network address as reported by ``lnpbp_address_parse``."""

    address: str
    network: str
    payload: str
    value: Optional[int] = None
    form: str
    format: str
    witness_version: Optional[int] = None


class Asset(WireModel):
    """Fungible (RGB20) asset description."""

    genesis: str
    id: str
    ticker: str
    name: str
    description: Optional[str] = None
    decimal_precision: int = Field(ge=0, le=255)
    date: str
    known_circulating: int = Field(ge=0)
    issue_limit: Optional[int] = Field(default=None, ge=0)


class Invoice(WireModel):
    beneficiary: str
    amount: Optional[int] = Field(default=None, ge=0)
    asset: Optional[str] = None
    merchant: Optional[str] = None
    purpose: Optional[str] = None
    expiry: Optional[str] = None


class ConsignmentInfo(WireModel):
    """Metadata header of an asset-transfer consignment."""

    version: int = Field(ge=0, le=0xFFFF)
    asset: Asset
    schema_id: str
    endpoints_count: int = Field(ge=0, le=0xFFFF)
    transactions_count: int = Field(ge=0)
    transitions_count: int = Field(ge=0)
    extensions_count: int = Field(ge=0)


class Identifier(WireModel):
    id: str


class Bech32Payload(WireModel):
    """Bech32 string with a prefix the core does not know."""

    hrp: str
    payload: str
    data: str


class EncodedBlob(WireModel):
    """Raw payload of a hex, Base58 or Base64 string, hex-encoded."""

    data: str


class TextPayload(WireModel):
    """Script, descriptor, derivation path or other textual payload."""

    value: str


class OutPoint(WireModel):
    txid: str
    vout: int = Field(ge=0)


class Policy(WireModel):
    """Spending policy of a contract; only the ``current`` form exists."""

    current: str

    @property
    def descriptor(self) -> str:
        return self.current


class Contract(WireModel):
    id: str
    name: str
    chain: str
    policy: Policy


class Utxo(BaseModel):
    # Balance entries use snake_case on the wire for ``derivation_index``.
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    height: int
    offset: int = Field(ge=0)
    txid: str
    vout: int = Field(ge=0, le=0xFFFF)
    value: int = Field(ge=0)
    derivation_index: int = Field(ge=0)
    address: Optional[str] = None


class AddressDerivation(WireModel):
    address: str
    derivation: list[int] = Field(default_factory=list)


class DescriptorInfo(WireModel):
    descriptor: str
    category: str
    content: str
    key_type: Optional[str] = None


class Transfer(WireModel):
    """Result of paying an invoice: a PSBT and an optional consignment."""

    psbt: str
    consignment: Optional[str] = None
