"""Core domain — models, configuration, run state and services."""
