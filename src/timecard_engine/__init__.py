"""Employee time-clock hours and payroll calculation engine."""

__version__ = "0.1.0"
