"""Shared helpers for mrdm."""

from mrdm.utils.atomic import AtomicWriter, atomic_write

__all__ = ["AtomicWriter", "atomic_write"]
