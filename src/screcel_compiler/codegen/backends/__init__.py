"""Code generation backends."""

from .CodeGenerator import CodeGenerator, codegen_project

__all__ = ["CodeGenerator", "codegen_project"]
