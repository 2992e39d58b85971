"""Building blocks used by the install, uninstall, and status use cases."""
