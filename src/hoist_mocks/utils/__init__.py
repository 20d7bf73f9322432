"""
Utility Package.

Console output and logging configuration shared by the command line.
"""
