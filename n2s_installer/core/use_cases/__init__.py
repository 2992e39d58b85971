"""Top-level operations: install, uninstall, status."""
