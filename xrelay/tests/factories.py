"""
Shared builders for checkpoint messages and envelopes used across tests.
"""

from xrelay.codec import CheckpointMessage, encode, tag_from_text
from xrelay.core.chains import AVALANCHE_FUJI, BASE_SEPOLIA, ETHEREUM_SEPOLIA

NOW = 1_700_000_000
DAY = 86400

CID = "bafybeigdyrzt5sfp7udm7hu76uh7y26nf3efuylqabf3oclgtqy55fbzdi"
OTHER_CID = "bafkreihdwdcefgh4dqkjv67uzcmw7ojee6xedzdetojuzjevtenxquvyku"
CREATOR = "0x" + "11" * 20
EMITTER = "0x" + "00" * 12 + "22" * 20
OTHER_EMITTER = "0x" + "00" * 12 + "33" * 20
ADMIN = "0xadmin"

CHAINS = [BASE_SEPOLIA, AVALANCHE_FUJI, ETHEREUM_SEPOLIA]


def make_message(**overrides) -> CheckpointMessage:
    fields = dict(
        cid=CID,
        tag=tag_from_text("test"),
        expires_at=NOW + DAY,
        creator=CREATOR,
        created_at=NOW,
        source_chain_id=BASE_SEPOLIA,
    )
    fields.update(overrides)
    return CheckpointMessage(**fields)


def make_payload(**overrides) -> bytes:
    return encode(make_message(**overrides))
