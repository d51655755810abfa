"""
Filesystem tools for projscope.

This module contains the file enumerator and its ignore-rule handling.
"""
