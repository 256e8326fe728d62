"""Configuration and path handling for rmp."""
