"""Core building blocks shared by every permstore feature."""
