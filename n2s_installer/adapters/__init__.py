"""External-call adapters."""
