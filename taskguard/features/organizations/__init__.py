"""
Organizations: a two-tier tree of parent organizations and their direct children.
"""
