"""Structured data and container formats."""
