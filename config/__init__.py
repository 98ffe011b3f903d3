"""Configuration package for Who Lies Tonight."""
