"""Configuration loading and typed slideshow settings."""
