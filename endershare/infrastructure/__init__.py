"""Infrastructure layer - external adapters and wiring."""
