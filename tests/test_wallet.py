import pytest

from citadel_bridge.errors import CitadelError, ForeignKind
from citadel_bridge.ffi import ForeignResult, LastError, TransferResult
from citadel_bridge.wallet import DescriptorType, InvoiceType, WalletClient

CONTRACT = {
    "id": "contract1",
    "name": "Savings",
    "chain": "testnet",
    "policy": {"current": "wpkh([8b6c2a1f/84h/1h/0h]tpub/0/*)"},
}


@pytest.fixture
def wallet(fake_layer) -> WalletClient:
    return WalletClient(fake_layer, context="client")


def test_list_contracts_decodes_reply(wallet, fake_layer) -> None:
    handle = fake_layer.reply_json("citadel_contract_list", [CONTRACT])

    contracts = wallet.list_contracts()

    assert contracts[0].name == "Savings"
    assert contracts[0].policy.descriptor.startswith("wpkh(")
    assert fake_layer.releases[handle] == 1
    assert ("citadel_contract_list", "client") in fake_layer.calls


def test_create_single_sig_passes_descriptor_type(wallet, fake_layer) -> None:
    fake_layer.reply_json("citadel_single_sig_create", CONTRACT)

    contract = wallet.create_single_sig("Savings", "[8b6c2a1f/84h/1h/0h]tpub", DescriptorType.TAPROOT)

    assert contract.id == "contract1"
    assert fake_layer.calls[-1] == (
        "citadel_single_sig_create",
        "client",
        "Savings",
        "[8b6c2a1f/84h/1h/0h]tpub",
        3,
    )


def test_contract_balance(wallet, fake_layer) -> None:
    fake_layer.reply_json(
        "citadel_contract_balance",
        {
            "btc": [
                {
                    "height": 100,
                    "offset": 2,
                    "txid": "ab" * 32,
                    "vout": 1,
                    "value": 5000,
                    "derivation_index": 4,
                    "address": "tb1qexample",
                }
            ]
        },
    )

    balance = wallet.contract_balance("contract1")

    assert balance["btc"][0].derivation_index == 4
    assert fake_layer.calls[-1] == ("citadel_contract_balance", "client", "contract1", True, 20)


def test_used_addresses_maps_indexes(wallet, fake_layer) -> None:
    fake_layer.reply_json("citadel_address_list", {"tb1qa": 0, "tb1qb": 5})

    addresses = wallet.used_addresses("contract1")

    assert [(a.address, a.derivation) for a in addresses] == [("tb1qa", [0]), ("tb1qb", [5])]


def test_create_invoice_returns_string(wallet, fake_layer) -> None:
    handle = fake_layer.allocate("lnpbp1invoice")
    fake_layer.replies["citadel_invoice_create"] = ForeignResult.success(handle)

    invoice = wallet.create_invoice("contract1", invoice_type=InvoiceType.DESCRIPTOR, amount=1000)

    assert invoice == "lnpbp1invoice"
    assert fake_layer.calls[-1] == (
        "citadel_invoice_create",
        "client",
        1,
        "contract1",
        None,
        1000,
        None,
        None,
        False,
        False,
    )
    assert fake_layer.releases[handle] == 1


def test_pay_invoice_returns_transfer(wallet, fake_layer) -> None:
    psbt = fake_layer.allocate("cHNidP8B")
    consignment = fake_layer.allocate("consignment1q")
    fake_layer.transfers["citadel_invoice_pay"] = TransferResult(True, psbt, consignment)

    transfer = wallet.pay_invoice("contract1", "lnpbp1invoice", fee=200)

    assert transfer.psbt == "cHNidP8B"
    assert transfer.consignment == "consignment1q"
    assert fake_layer.leaked == []


def test_failed_call_surfaces_last_error(wallet, fake_layer) -> None:
    fake_layer.last_error_record = LastError(has_error=True, code=12, message="unknown contract")

    with pytest.raises(CitadelError) as excinfo:
        wallet.publish_psbt("cHNidP8B")

    assert excinfo.value.kind is ForeignKind.FOREIGN
    assert excinfo.value.code == 12


def test_failed_call_without_error_is_protocol_violation(wallet) -> None:
    with pytest.raises(CitadelError) as excinfo:
        wallet.accept_consignment("consignment1q")

    assert excinfo.value.is_protocol_violation


def test_parse_descriptor(wallet, fake_layer) -> None:
    handle = fake_layer.allocate('{"descriptor": "wpkh(key)", "category": "segwit", "content": "key"}')
    fake_layer.replies["lnpbp_descriptor_parse"] = ForeignResult.success(handle)

    info = wallet.parse_descriptor("wpkh(key)")

    assert info.category == "segwit"
    assert fake_layer.releases[handle] == 1
