"""Core value types, keying, caching and configuration."""
