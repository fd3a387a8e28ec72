"""
HTTP surface for the matching service.
"""
