"""
sweep - find unused assets, files, dependencies and exports in JS/TS projects.
"""

__version__ = "0.1.0"
