"""Namespace navigation engine.

This module resolves slash-delimited paths against nested buckets.
It powers the shell commands, prompt, and tab completion.
"""
