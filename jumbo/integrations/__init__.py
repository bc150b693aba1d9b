"""Integrations with storage outside the process."""
