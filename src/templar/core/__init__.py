"""
Templar core: configuration, logging, exceptions and data models.
"""
