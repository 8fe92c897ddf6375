"""
Core utilities shared by the installer: paths, formatting, progress, logging.
"""
