"""Kubernetes API helpers for the faros operator."""
