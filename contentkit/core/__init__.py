"""
Core Module
===========

Event dispatch, elements, fields, tasks, and the control panel client.
"""
