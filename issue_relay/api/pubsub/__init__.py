"""Pub/Sub push delivery resources."""
