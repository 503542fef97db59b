"""toolwire — line-delimited JSON-RPC 2.0 tool server over stdio."""

from __future__ import annotations

__version__ = "0.1.0"
