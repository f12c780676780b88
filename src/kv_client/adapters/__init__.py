"""Adapters - concrete transports."""
