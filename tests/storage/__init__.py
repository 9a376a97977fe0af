"""Client-level tests for object store backends."""
