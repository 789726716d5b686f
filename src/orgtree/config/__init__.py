"""Configuration — settings discovery, models, and logging setup."""
