"""
privnet Network Module - client side of a running node's RPC endpoint.
"""

from privnet.network.rpc import (
    CREATE_CHECKPOINT_METHOD,
    ChainRpcClient,
    RpcError,
    get_uri,
)

__all__ = [
    "CREATE_CHECKPOINT_METHOD",
    "ChainRpcClient",
    "RpcError",
    "get_uri",
]
