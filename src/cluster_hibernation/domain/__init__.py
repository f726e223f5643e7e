"""Domain layer - cluster identity, instances, lifecycle states and errors."""
