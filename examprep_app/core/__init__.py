"""Core infrastructure: extensions, bootstrap, logging and error handling."""
