"""Provider adapter layer."""
