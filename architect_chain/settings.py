"""Node configuration: network address, mining address and node id."""

from __future__ import annotations

import os
import threading
from collections.abc import Mapping

DEFAULT_NODE_ADDR = "127.0.0.1:2001"

_NODE_ADDRESS_KEY = "NODE_ADDRESS"
_MINING_ADDRESS_KEY = "MINING_ADDRESS"
_NODE_ID_KEY = "NODE_ID"


class Config:
    """Thread-safe settings for a node, seeded from the environment."""

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        env = os.environ if environ is None else environ
        self._lock = threading.Lock()
        self._values: dict[str, str] = {
            _NODE_ADDRESS_KEY: env.get(_NODE_ADDRESS_KEY, DEFAULT_NODE_ADDR)
        }
        node_id = env.get(_NODE_ID_KEY)
        if node_id is not None:
            self._values[_NODE_ID_KEY] = node_id

    @property
    def node_addr(self) -> str:
        """The address this node listens on."""
        with self._lock:
            return self._values[_NODE_ADDRESS_KEY]

    @node_addr.setter
    def node_addr(self, addr: str) -> None:
        with self._lock:
            self._values[_NODE_ADDRESS_KEY] = addr

    @property
    def mining_addr(self) -> str | None:
        """The address that receives mining rewards, if this node mines."""
        with self._lock:
            return self._values.get(_MINING_ADDRESS_KEY)

    @mining_addr.setter
    def mining_addr(self, addr: str) -> None:
        with self._lock:
            self._values[_MINING_ADDRESS_KEY] = addr

    @property
    def node_id(self) -> str | None:
        """The node identifier, if one was given."""
        with self._lock:
            return self._values.get(_NODE_ID_KEY)

    @node_id.setter
    def node_id(self, node_id: str) -> None:
        with self._lock:
            self._values[_NODE_ID_KEY] = node_id

    @property
    def is_miner(self) -> bool:
        """True once a mining address has been set."""
        with self._lock:
            return _MINING_ADDRESS_KEY in self._values

    def extract_node_id_from_addr(self) -> str:
        """Return the part of the node address after the last colon."""
        return self.node_addr.rsplit(":", 1)[-1]


GLOBAL_CONFIG = Config()