"""Examples directory.

This directory exists so that the examples embedded in the README are linted as part of CI, like
the rest of the code.
"""
