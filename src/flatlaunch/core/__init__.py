"""Core launcher logic: configuration, host probing, and launch assembly."""
