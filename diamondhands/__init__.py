"""
Diamond Hands - Two-player push-your-luck card game with ledger replication.

The host runs the authoritative game and mirrors it to watchers through an
eventually-consistent ledger. The package provides:
- A deterministic game/turn state machine
- Debounced, fingerprint-deduplicated publishing of room state
- Watcher polling with stale-read handling
- Host/watcher role coordination, a REST API and a terminal CLI
"""

__version__ = "0.1.0"
