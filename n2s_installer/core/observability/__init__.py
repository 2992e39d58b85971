"""Logging setup and progress sinks."""
