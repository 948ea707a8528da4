"""Unit tests for the data types."""
