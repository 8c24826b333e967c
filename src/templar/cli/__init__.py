"""
Templar command-line interface.
"""
