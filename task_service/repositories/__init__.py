"""Storage accessors for Task Service."""
