"""Core services and error types."""
