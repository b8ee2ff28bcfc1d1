"""Runtime services (telemetry, environment configuration)."""
