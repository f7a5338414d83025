"""
Nullistant - wake-phrase voice control for on-screen interfaces.
"""
__version__ = "0.1.0"
