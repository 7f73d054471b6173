"""Process-wide settings and persisted user config."""
