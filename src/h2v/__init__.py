"""
h2v - HTML to video

Drives a rendered HTML document through a scripted timeline of overlay
transitions and captures one PNG per step for later video assembly.
"""

__version__ = "0.1.0"
