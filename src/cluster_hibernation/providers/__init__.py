"""Cloud provider adapters and their hibernation actuators."""
