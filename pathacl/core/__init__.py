"""Configuration and terminal output."""
