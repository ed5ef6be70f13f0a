"""
runedex -- Workspace symbol index for RuneScript

Classifies every word of .rs2 scripts and their config files with a
priority ordered rule chain, and keeps a workspace-wide index of
declarations and references for editor tooling.
"""

__version__ = "0.1.0"
