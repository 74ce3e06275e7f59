"""Realtime chat fan-out service."""
