"""Configuration — Settings loaded from environment variables and YAML."""
