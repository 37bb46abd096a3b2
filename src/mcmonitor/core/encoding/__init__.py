"""Encoders for monitor responses."""
