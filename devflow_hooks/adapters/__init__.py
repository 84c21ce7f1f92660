"""Infrastructure adapters for Devflow Hooks."""
