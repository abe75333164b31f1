"""Configuration loading for forklift."""
