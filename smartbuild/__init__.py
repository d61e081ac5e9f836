"""
smartbuild - configuration and consistency engine for model-based code generation.

Sits between a hand-authored data dictionary, a dataflow model and an external
code generator:
- loads the dictionary into a symbol table and resolves storage classes
- reconciles constant block output types with their parameters (smart scan)
- builds a target-aware, fixed-step build configuration
- runs the generator inside an isolated output directory and reports once
"""

__version__ = "0.1.0"
