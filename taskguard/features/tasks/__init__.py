"""
Tasks: personal and work items scoped to an organization and an owner.
"""
