"""Reverse dependency graph over artifact digests."""

from .model import BackDepGraph

__all__ = ["BackDepGraph"]
