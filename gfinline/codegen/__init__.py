"""
gfinline.codegen: renderers turning a cascade tree into executable code.

Modules:
  - python_codegen: Python source + namespace, compiled into a callable
"""

__all__ = ["python_codegen"]
