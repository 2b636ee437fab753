"""
tenor - container engine abstraction with a Docker Unix socket adapter
"""

__version__ = '0.1.0'
