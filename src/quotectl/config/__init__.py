"""Configuration: quotectl.toml discovery, section models, settings, logging."""
