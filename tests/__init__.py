"""
Test Suite
==========

Unit tests for fields, tasks, events, and the control panel client.
"""
