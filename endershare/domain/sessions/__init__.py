"""Sharing session domain models."""
