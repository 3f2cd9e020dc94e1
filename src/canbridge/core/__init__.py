"""Core configuration and transport interfaces."""
