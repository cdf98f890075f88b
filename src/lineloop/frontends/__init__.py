"""Frontends - User interfaces for lineloop.

Submodules:
    cli/    Command-line interface and interactive REPL
"""
