"""Canonical encodings and digests."""
