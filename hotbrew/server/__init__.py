"""Subscription API server."""
