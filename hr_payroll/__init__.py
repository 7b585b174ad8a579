"""HR payroll engine — attendance-based compensation and PF register."""

__version__ = "1.0.0"
