"""
Data Models
===========

Pydantic models for task records, notifications, and control panel actions.
"""
