"""Attendance module — daily attendance rows and the holiday calendar."""
