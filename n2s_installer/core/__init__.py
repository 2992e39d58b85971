"""Core engine: models, configuration, services, and use cases."""
