"""Append-only event log backends for reviewgate."""
