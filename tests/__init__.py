"""Tests for objectstore-fs."""
