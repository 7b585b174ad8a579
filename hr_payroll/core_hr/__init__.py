"""Core HR module — employee master data read by the compensation engine."""
