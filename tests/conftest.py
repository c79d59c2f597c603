import pytest

from fake_layer import FakeForeignLayer


ASSET_JSON = {
    "genesis": "genesis1qxyz",
    "id": "rgb1asset0",
    "ticker": "USDT",
    "name": "Tether",
    "description": None,
    "decimalPrecision": 8,
    "date": "2021-02-02T00:00:00",
    "knownCirculating": 1000000,
    "issueLimit": None,
}

ADDRESS_JSON = {
    "address": "bc1qw508d6qejxtdg4y5r3zarvary0c5xw7kv8f3t4",
    "network": "bitcoin",
    "payload": "751e76e8199196d454941c45d1b3a323f1433bd6",
    "value": None,
    "form": "P2WPKH",
    "format": "bech32",
    "witnessVersion": 0,
}


@pytest.fixture
def fake_layer() -> FakeForeignLayer:
    return FakeForeignLayer()


@pytest.fixture
def asset_json() -> dict:
    return dict(ASSET_JSON)


@pytest.fixture
def address_json() -> dict:
    return dict(ADDRESS_JSON)
