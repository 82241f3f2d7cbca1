"""doxyset CLI commands."""
