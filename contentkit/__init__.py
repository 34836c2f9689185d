"""
contentkit
==========

CMS extension points: custom fields, background tasks, and the
control panel action queue.
"""

__version__ = "1.0.0"
__author__ = "contentkit developers"
