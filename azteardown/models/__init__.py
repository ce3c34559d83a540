"""Data models for teardown operations."""
