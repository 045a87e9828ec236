"""Core infrastructure: settings, logging, security guards, graph checks."""
