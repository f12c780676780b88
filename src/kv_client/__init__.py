"""
KV Client - Object Wire Mapping and HTTP Transport

Translates key/value objects (vector clocks, links, metadata, secondary
indexes, siblings) to and from the binary and HTTP wire encodings of an
eventually-consistent key-value store, and defines the verb-level HTTP
contract every request executor honors.
"""

__version__ = "0.1.0"
__author__ = "Systems Engineering Portfolio"
