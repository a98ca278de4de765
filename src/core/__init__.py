"""Core services: settings, logging and cache."""
