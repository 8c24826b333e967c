"""
Templar Template Compiler

Turns request templates into literal request text.
"""

from .compiler import TemplateCompiler, compile_template

__all__ = ["TemplateCompiler", "compile_template"]
