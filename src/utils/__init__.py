"""Shared utilities for automarshal."""
