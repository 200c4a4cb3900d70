"""
Host control API.
"""
