"""Command-line front end.

This module maps process flags and shell input onto navigation calls.
"""
