"""Core services — detection, package lists, installation."""
