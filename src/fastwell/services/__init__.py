"""Domain services for fastwell."""
