"""Shared runtime foundations.

This module holds constants, configuration, errors, logging, and typed
models used by the store, navigation, and shell layers.
"""
