"""Host UI adapters for the tracking engine."""
