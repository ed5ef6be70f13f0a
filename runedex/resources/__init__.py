"""
Static tables: triggers, config key shapes and info texts.
"""
