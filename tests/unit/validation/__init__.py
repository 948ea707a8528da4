"""Unit tests for constraint validation."""
