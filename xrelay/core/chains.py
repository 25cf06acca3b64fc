"""
Supported chain catalogue.

EVM chain ids are what RPC providers and wallets use. Transport chain ids are
what appears in cross-chain messages (16-bit). Only transport ids are stored.
"""

from dataclasses import dataclass
from typing import Dict

BASE_SEPOLIA_EVM = 84532
AVALANCHE_FUJI_EVM = 43113
ETHEREUM_SEPOLIA_EVM = 11155111

BASE_SEPOLIA = 10004
AVALANCHE_FUJI = 6
ETHEREUM_SEPOLIA = 10002


@dataclass(frozen=True)
class ChainMetadata:
    chain_id: int
    evm_chain_id: int
    name: str
    explorer_url: str
    core_address: str


CHAINS: Dict[int, ChainMetadata] = {
    BASE_SEPOLIA: ChainMetadata(
        chain_id=BASE_SEPOLIA,
        evm_chain_id=BASE_SEPOLIA_EVM,
        name="Base Sepolia",
        explorer_url="https://sepolia.basescan.org",
        core_address="0x79a1027a6a159502049f10906d333ec57e95f083",
    ),
    AVALANCHE_FUJI: ChainMetadata(
        chain_id=AVALANCHE_FUJI,
        evm_chain_id=AVALANCHE_FUJI_EVM,
        name="Avalanche Fuji",
        explorer_url="https://testnet.snowtrace.io",
        core_address="0x7bbce28e64b3f8b84d876ab298393c38ad7aac4c",
    ),
    ETHEREUM_SEPOLIA: ChainMetadata(
        chain_id=ETHEREUM_SEPOLIA,
        evm_chain_id=ETHEREUM_SEPOLIA_EVM,
        name="Ethereum Sepolia",
        explorer_url="https://sepolia.etherscan.io",
        core_address="0x4a8bc80ed5a4067f1fff25799c844145ddf9e5e5",
    ),
}

_EVM_TO_TRANSPORT = {meta.evm_chain_id: chain_id for chain_id, meta in CHAINS.items()}


def evm_to_transport_chain_id(evm_chain_id: int) -> int:
    """
    Convert EVM chain ID to transport chain ID.

    Raises:
        ValueError: If the EVM chain is not supported
    """
    try:
        return _EVM_TO_TRANSPORT[evm_chain_id]
    except KeyError:
        raise ValueError(f"Unsupported EVM chain ID: {evm_chain_id}") from None


def transport_to_evm_chain_id(chain_id: int) -> int:
    return chain_metadata(chain_id).evm_chain_id


def is_supported_evm_chain_id(evm_chain_id: int) -> bool:
    return evm_chain_id in _EVM_TO_TRANSPORT


def is_supported_chain_id(chain_id: int) -> bool:
    return chain_id in CHAINS


def chain_metadata(chain_id: int) -> ChainMetadata:
    """
    Get metadata for a transport chain ID.

    Raises:
        ValueError: If the chain is not supported
    """
    meta = CHAINS.get(chain_id)
    if meta is None:
        raise ValueError(f"Unsupported transport chain ID: {chain_id}")
    return meta


def chain_name(chain_id: int) -> str:
    """Human-readable name, or "Unknown Chain" for unsupported ids."""
    meta = CHAINS.get(chain_id)
    return meta.name if meta else "Unknown Chain"
