"""Price tables and the booking price calculator."""
