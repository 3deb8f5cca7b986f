"""
Walrus Site Gateway

Resolves portal URLs to Walrus site objects on Sui and serves their files
from the Walrus aggregator.
"""

__version__ = "1.0.0"
