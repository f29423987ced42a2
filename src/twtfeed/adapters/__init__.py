"""Adapters for disk, network and output."""
