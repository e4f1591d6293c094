"""Application layer - orchestrates domain and infrastructure."""
