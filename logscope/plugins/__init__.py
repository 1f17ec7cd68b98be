"""Producers shipped with logscope."""
