"""Session storage adapters."""

from .registry import SessionRegistry
from .yaml_store import PassthroughItemCodec, YamlSessionStore

__all__ = [
    "SessionRegistry",
    "YamlSessionStore",
    "PassthroughItemCodec",
]
