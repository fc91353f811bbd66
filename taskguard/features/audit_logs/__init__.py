"""
Audit logs: persisted record of who did what, and of every access denial.
"""
