"""
Users: bearer token verification and the Principal snapshot built per request.
"""
