"""Utility helpers."""

from code4life_ai.utils.logging import setup_logging

__all__ = ['setup_logging']
