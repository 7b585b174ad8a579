"""Compensation module — attendance-based pay and PF computation."""
