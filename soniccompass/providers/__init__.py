"""Concrete provider adapters, one sub-package per capability."""
