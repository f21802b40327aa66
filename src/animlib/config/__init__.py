"""Library configuration."""
