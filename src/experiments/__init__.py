"""Drivers and instrumentation for heap_sim experiments."""
