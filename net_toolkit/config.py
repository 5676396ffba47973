from __future__ import annotations

# Network scan defaults
DEFAULT_PORT_RANGE = "all"
DEFAULT_TIMEOUT_S = 2.0
DEFAULT_THREADS = 10

# Hosts scanned at once during a network sweep. Not tied to DEFAULT_THREADS.
HOST_CONCURRENCY = 10

# Stealth scan defaults
STEALTH_START_PORT = 1
STEALTH_END_PORT = 1024
STEALTH_TIMEOUT_S = 1.0
STEALTH_THREADS = 50

# Largest block a network sweep will expand (a /16)
MAX_NETWORK_ADDRESSES = 65536

# Liveness heuristic, tried in this order
LIVENESS_PORTS = (80, 443, 22, 21, 25, 3389)

# Banner grabbing
BANNER_BUFFER_SIZE = 2048
VERSION_MAX_LEN = 60

# Progress is reported every 5% of ports, never more often than this
PROGRESS_MIN_BATCH = 100

# Outstanding futures per worker in the pool window
PENDING_PER_WORKER = 4

DEFAULT_OUT_DIR = "SCANS"
