"""Persistence adapters outside the relational store."""

from .watermark import WatermarkStore, WatermarkStoreError

__all__ = ["WatermarkStore", "WatermarkStoreError"]
