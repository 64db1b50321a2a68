"""Core types and exceptions shared by every pipeline stage."""
