"""Embedding model client and adapter."""
