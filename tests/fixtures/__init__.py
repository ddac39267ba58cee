"""Shared test fixtures organized by component."""
