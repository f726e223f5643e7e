"""Application layer - hibernation use cases."""
