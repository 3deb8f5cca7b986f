"""Sui registry access."""
from .client import SuiRpcClient
from .protocols import DynamicFieldPage, NameServiceProtocol, RegistryClientProtocol

__all__ = ["SuiRpcClient", "DynamicFieldPage", "NameServiceProtocol", "RegistryClientProtocol"]
