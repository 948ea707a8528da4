"""Unit tests for the resource types."""
