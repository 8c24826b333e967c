"""
Templar - HTTP request templates

Compiles parameterized request templates against named environments, executes
the resulting requests and captures the raw responses.
"""

__version__ = "0.1.0"
