"""
Interfaces module - User-facing interfaces for the Network Security Tutor.

This module provides:
1. CLI interface for command-line interaction
2. Web API using FastAPI
"""
