"""Configuration loading for the analytics engine."""
