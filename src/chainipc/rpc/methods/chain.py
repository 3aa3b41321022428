"""Blockchain query RPC method handlers.

Placeholder chain data: hashes are derived from the height and the block
count is fixed by configuration.
"""

import logging
from typing import TYPE_CHECKING, Any

from chainipc.rpc.registry import InvalidParams, RPCHandler

if TYPE_CHECKING:
    from chainipc.config.models import ChainConfig

logger = logging.getLogger(__name__)

BLOCK_HASH_WIDTH = 22


def block_hash(height: int) -> str:
    """Derive the placeholder hash for a block height."""
    return format(height, f"0{BLOCK_HASH_WIDTH}x")


def _height_param(params: list[Any]) -> int:
    if not params:
        raise InvalidParams("Missing parameter: height")
    height = params[0]
    if isinstance(height, bool) or not isinstance(height, int):
        raise InvalidParams("Invalid parameter: height must be an integer")
    if height < 0:
        raise InvalidParams("Invalid parameter: height must be non-negative")
    return height


def register_chain_methods(
    methods: dict[str, RPCHandler], config: "ChainConfig"
) -> None:
    """Register chain query methods.

    Args:
        methods: Method table being assembled for a registry.
        config: Chain settings.
    """

    async def getblockhash(params: list[Any]) -> str:
        """Return the hash of the block at the given height.

        Params:
            height: Non-negative block height
        """
        return block_hash(_height_param(params))

    async def getblockcount(params: list[Any]) -> int:
        """Return the number of blocks in the chain."""
        return config.block_count

    methods["getblockhash"] = getblockhash
    methods["getblockcount"] = getblockcount

    logger.debug("Registered chain RPC methods")
