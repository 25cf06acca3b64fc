"""
Tests for the supported chain catalogue.
"""

import pytest

from xrelay.core.chains import (
    AVALANCHE_FUJI,
    BASE_SEPOLIA,
    ETHEREUM_SEPOLIA,
    chain_metadata,
    chain_name,
    evm_to_transport_chain_id,
    is_supported_chain_id,
    is_supported_evm_chain_id,
    transport_to_evm_chain_id,
)


def test_known_chain_ids():
    assert BASE_SEPOLIA == 10004
    assert AVALANCHE_FUJI == 6
    assert ETHEREUM_SEPOLIA == 10002


def test_evm_transport_conversion():
    assert evm_to_transport_chain_id(84532) == BASE_SEPOLIA
    assert evm_to_transport_chain_id(43113) == AVALANCHE_FUJI
    assert evm_to_transport_chain_id(11155111) == ETHEREUM_SEPOLIA

    for chain_id in (BASE_SEPOLIA, AVALANCHE_FUJI, ETHEREUM_SEPOLIA):
        assert evm_to_transport_chain_id(transport_to_evm_chain_id(chain_id)) == chain_id


def test_unsupported_chains():
    with pytest.raises(ValueError):
        evm_to_transport_chain_id(1)
    with pytest.raises(ValueError):
        chain_metadata(9999)
    with pytest.raises(ValueError):
        transport_to_evm_chain_id(9999)

    assert not is_supported_evm_chain_id(1)
    assert not is_supported_chain_id(9999)
    assert chain_name(9999) == "Unknown Chain"


def test_metadata():
    meta = chain_metadata(BASE_SEPOLIA)

    assert meta.name == "Base Sepolia"
    assert meta.evm_chain_id == 84532
    assert meta.explorer_url.startswith("https://")
    assert chain_name(AVALANCHE_FUJI) == "Avalanche Fuji"
    assert is_supported_chain_id(ETHEREUM_SEPOLIA)
    assert is_supported_evm_chain_id(11155111)
