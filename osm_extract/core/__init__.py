"""Core utilities and shared infrastructure.

- config: Configuration loading and validation
- constants: Named constants, coordinate bounds, category catalogue
- exceptions: Custom exception hierarchy
"""
