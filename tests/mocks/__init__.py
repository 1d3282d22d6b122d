"""Test doubles shared across the unit and integration suites."""
