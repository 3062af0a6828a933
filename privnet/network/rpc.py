"""
JSON-RPC client for talking to a running node.

Only the calls the engine needs are wrapped; everything goes through
`rpc_send`. Transport failures (connection refused, timeout) propagate as
httpx exceptions; error responses from the node raise RpcError carrying the
node's message unchanged.
"""

import itertools
from typing import Any, Optional

import httpx

from privnet.core.chain.models import ChainDescriptor
from privnet.core.errors import ErrorKind, PrivnetError, configuration_error
from privnet.utils.logger import get_logger
from privnet.utils.validation import validate_node_index

logger = get_logger("rpc")

CREATE_CHECKPOINT_METHOD = "expresscreatecheckpoint"


class RpcError(PrivnetError):
    """Error object returned by the node."""

    def __init__(self, code: int, message: str, data: Any = None):
        super().__init__(ErrorKind.RPC, message)
        self.code = code
        self.data = data


def get_uri(chain: ChainDescriptor, node_index: int = 0, host: str = "127.0.0.1") -> str:
    """RPC endpoint of consensus node `node_index`."""
    ok, error = validate_node_index(chain, node_index)
    if not ok:
        raise configuration_error(error)
    return f"http://{host}:{chain.consensus_nodes[node_index].rpc_port}"


class ChainRpcClient:
    """
    Minimal JSON-RPC 2.0 client.

    Args:
        timeout: Seconds before a request is abandoned
        transport: Optional httpx transport (e.g. httpx.MockTransport)
    """

    def __init__(self, timeout: float = 30.0, transport: Optional[httpx.BaseTransport] = None):
        self.timeout = timeout
        self.transport = transport
        self._ids = itertools.count(1)

    def get_uri(self, chain: ChainDescriptor, node_index: int = 0, host: str = "127.0.0.1") -> str:
        return get_uri(chain, node_index, host)

    def rpc_send(self, uri: str, method: str, *params: Any) -> Any:
        """
        Send one request and return its `result`.

        Raises:
            RpcError: The node answered with an error object
            httpx.HTTPError: Transport failure or non-2xx HTTP status
        """
        request = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": list(params),
        }
        logger.debug(f"RPC {method} -> {uri}")

        with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
            response = client.post(uri, json=request)
            response.raise_for_status()
            body = response.json()

        if body.get("error"):
            error = body["error"]
            raise RpcError(error.get("code", 0), error.get("message", ""), error.get("data"))
        return body.get("result")

    def create_checkpoint(self, uri: str, archive_path: str) -> Any:
        """Ask a running node to write a checkpoint archive itself."""
        return self.rpc_send(uri, CREATE_CHECKPOINT_METHOD, archive_path)
