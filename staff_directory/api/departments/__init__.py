"""Departments module."""
