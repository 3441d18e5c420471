"""Configuration, error types and small helpers shared across the package."""
