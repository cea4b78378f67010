"""HR module — employees, designations, payroll, leave and career events."""
