"""Unit tests for the core framework."""
