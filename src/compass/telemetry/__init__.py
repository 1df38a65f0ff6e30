"""Session telemetry and log channels."""
