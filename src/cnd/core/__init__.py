"""Core library for cnd: session registry, configuration, telemetry."""
