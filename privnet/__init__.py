"""
privnet - private blockchain network toolkit

Bootstraps small private test networks and manages their state:
- Consensus node keys, wallets and the shared multi-sig contract
- Port topology for up to seven local nodes
- Runtime guard telling whether a node is up
- Online/offline checkpoints and atomic restore
"""
