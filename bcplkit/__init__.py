"""Token types, syntax tree, label management, code buffer, runtime library and optimisation passes for a BCPL compiler."""

__version__ = "0.1.0"