"""Profile loading."""
