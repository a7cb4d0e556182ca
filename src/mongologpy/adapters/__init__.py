"""Adapters connecting the core to logging and to the document store."""
