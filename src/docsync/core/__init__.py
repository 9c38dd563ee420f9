"""Core types, error classification, conflict scanning and settings."""
