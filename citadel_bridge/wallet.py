"""Thin wallet client over the native citadel core.

The client is intentionally thin: each helper maps directly to a native entry
point, routes the result through :class:`~citadel_bridge.bridge.ResponseBridge`
and decodes the JSON reply into wire models. Contract creation, invoicing and
payment construction all happen inside the native core.
"""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import Any

from .bridge import ResponseBridge
from .config import BridgeConfig, load_bridge_config
from .ffi import CtypesForeignLayer, ForeignLayer
from .models import AddressDerivation, Asset, Contract, DescriptorInfo, Transfer, Utxo

logger = logging.getLogger(__name__)


class DescriptorType(IntEnum):
    BARE = 0
    HASHED = 1
    SEGWIT = 2
    TAPROOT = 3


class InvoiceType(IntEnum):
    ADDRESS_UTXO = 0
    DESCRIPTOR = 1
    PSBT = 2


class WalletClient:
    """Wallet entry points bound to one native client handle.

    The handle is single-owner: calls from several threads must be serialized
    by the caller, since the native last-error slot is shared per handle.
    """

    def __init__(self, layer: ForeignLayer, context: Any) -> None:
        self.layer = layer
        self.context = context
        self.bridge = ResponseBridge(layer, context)

    @classmethod
    def embedded(cls, config: BridgeConfig | None = None) -> "WalletClient":
        """Load the native library and start an embedded runtime."""

        config = config or load_bridge_config()
        layer = CtypesForeignLayer.from_config(config)
        context = layer.start_embedded(config.network, config.data_dir, config.electrum_server)
        logger.info("Embedded citadel runtime started on %s", config.network)
        return cls(layer, context)

    def _call(self, entry_point: str, *args: Any) -> str:
        return self.bridge.bridge(self.layer.invoke(entry_point, self.context, *args))

    def _call_json(self, entry_point: str, model: Any, *args: Any) -> Any:
        return self.bridge.bridge_to_bytes(self.layer.invoke(entry_point, self.context, *args), model)

    # Contracts -------------------------------------------------------------

    def create_single_sig(
        self, name: str, pubkey_chain: str, descriptor_type: DescriptorType = DescriptorType.SEGWIT
    ) -> Contract:
        logger.info("Creating single-sig contract %s", name)
        return self._call_json(
            "citadel_single_sig_create", Contract, name, pubkey_chain, int(descriptor_type)
        )

    def list_contracts(self) -> list[Contract]:
        return self._call_json("citadel_contract_list", list[Contract])

    def contract_operations(self, contract_id: str) -> list[dict[str, Any]]:
        return self._call_json("citadel_contract_operations", list[dict[str, Any]], contract_id)

    def contract_balance(
        self, contract_id: str, rescan: bool = True, lookup_depth: int = 20
    ) -> dict[str, list[Utxo]]:
        logger.debug("Requesting balance for %s", contract_id)
        return self._call_json(
            "citadel_contract_balance", dict[str, list[Utxo]], contract_id, rescan, lookup_depth
        )

    def parse_descriptor(self, descriptor: str) -> DescriptorInfo:
        return self.bridge.bridge_to_bytes(self.layer.descriptor_parse(descriptor), DescriptorInfo)

    # Assets ----------------------------------------------------------------

    def list_assets(self) -> list[Asset]:
        return self._call_json("citadel_asset_list", list[Asset])

    def import_asset(self, genesis_bech32: str) -> Asset:
        logger.info("Importing asset from genesis")
        return self._call_json("citadel_asset_import", Asset, genesis_bech32)

    # Addresses -------------------------------------------------------------

    def next_address(self, contract_id: str, legacy_segwit: bool = False) -> AddressDerivation:
        return self._call_json(
            "citadel_address_create", AddressDerivation, contract_id, False, legacy_segwit
        )

    def used_addresses(self, contract_id: str) -> list[AddressDerivation]:
        indexes = self._call_json("citadel_address_list", dict[str, int], contract_id, False, 0)
        return [
            AddressDerivation(address=address, derivation=[index])
            for address, index in indexes.items()
        ]

    # Invoices and transfers ------------------------------------------------

    def create_invoice(
        self,
        contract_id: str,
        *,
        invoice_type: InvoiceType = InvoiceType.ADDRESS_UTXO,
        asset_id: str | None = None,
        amount: int | None = None,
        merchant: str | None = None,
        purpose: str | None = None,
        legacy_segwit: bool = False,
    ) -> str:
        logger.info("Creating invoice for contract %s", contract_id)
        return self._call(
            "citadel_invoice_create",
            int(invoice_type),
            contract_id,
            asset_id,
            amount or 0,
            merchant,
            purpose,
            False,
            legacy_segwit,
        )

    def pay_invoice(
        self,
        contract_id: str,
        invoice: str,
        *,
        fee: int,
        amount: int | None = None,
        giveaway: int | None = None,
    ) -> Transfer:
        logger.info("Paying invoice from contract %s", contract_id)
        transfer = self.layer.invoke_transfer(
            "citadel_invoice_pay", self.context, contract_id, invoice, amount or 0, fee, giveaway or 0
        )
        psbt, consignment = self.bridge.bridge_pair(transfer)
        return Transfer(psbt=psbt, consignment=consignment)

    def publish_psbt(self, psbt: str) -> str:
        logger.info("Signing and publishing transaction")
        return self._call("citadel_psbt_publish", psbt)

    def accept_consignment(self, consignment: str) -> str:
        logger.info("Accepting consignment")
        return self._call("citadel_invoice_accept", consignment)
