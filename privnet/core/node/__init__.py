"""Node liveness guard and run lifecycle (see privnet.core.node.runner)"""
from privnet.core.node.guard import GuardHandle, NodeRuntimeGuard

__all__ = ["GuardHandle", "NodeRuntimeGuard"]
