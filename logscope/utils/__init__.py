"""Utility helpers for logscope."""
