"""
Messaging toolkit: direct and group messaging on top of a generic key-value store.

The building blocks are pluggable: a 'KeyValueStore' backend, an
'IdentityProvider', the KV-backed repositories, the 'MessagingController'
facade, the 'AdminAggregator', and the FastAPI application that exposes them.
"""

__version__ = "0.1.0"
