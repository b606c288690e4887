"""
CLI tools for dim.
"""
