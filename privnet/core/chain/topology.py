"""
Port allocation for consensus nodes.

Each node index owns a 1000-wide block of ports starting at the base port
(49152, the first IANA dynamic/private port). Inside a block the RPC, P2P and
WebSocket ports sit at fixed offsets, so seven local nodes never collide and
the highest port stays below 65535.
"""

from dataclasses import dataclass

from privnet.core.config import DEFAULT_BASE_PORT
from privnet.core.errors import configuration_error


MAX_NODE_COUNT = 7
PORT_BLOCK_SIZE = 1000

RPC_PORT_OFFSET = 332
TCP_PORT_OFFSET = 333
WS_PORT_OFFSET = 334


@dataclass(frozen=True)
class PortAssignment:
    """The three ports of one consensus node."""
    tcp: int
    ws: int
    rpc: int

    def as_tuple(self):
        return self.tcp, self.ws, self.rpc


def get_port_number(index: int, offset: int, base_port: int = DEFAULT_BASE_PORT) -> int:
    return base_port + index * PORT_BLOCK_SIZE + offset


def get_port_numbers(index: int, base_port: int = DEFAULT_BASE_PORT) -> PortAssignment:
    """
    Ports for the node at `index`.

    Args:
        index: Node index in [0, 6]
        base_port: First port of the allocation range

    Raises:
        PrivnetError(CONFIGURATION): If index is out of range or the
            resulting ports leave the 16-bit range
    """
    if not (0 <= index < MAX_NODE_COUNT):
        raise configuration_error(f"Node index {index} out of range [0, {MAX_NODE_COUNT - 1}]")

    ports = PortAssignment(
        tcp=get_port_number(index, TCP_PORT_OFFSET, base_port),
        ws=get_port_number(index, WS_PORT_OFFSET, base_port),
        rpc=get_port_number(index, RPC_PORT_OFFSET, base_port),
    )
    if min(ports.as_tuple()) < 1 or max(ports.as_tuple()) > 0xFFFF:
        raise configuration_error(f"Base port {base_port} puts node {index} outside the port range")
    return ports
