"""Shared helpers: identifiers and tracing."""
