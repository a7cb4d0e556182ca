"""Core domain: event model, document transformation and topology."""
