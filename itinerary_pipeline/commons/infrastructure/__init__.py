"""Shared infrastructure providers."""
