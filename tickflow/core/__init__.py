"""Core engine and event plumbing for tickflow."""
