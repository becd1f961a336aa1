"""Configuration, logging, errors and persistence."""
