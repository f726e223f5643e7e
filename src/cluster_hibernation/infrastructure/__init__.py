"""Infrastructure layer - provider port, actuator registry, logging, call context."""
