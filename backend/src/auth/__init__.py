"""Authentication module - accounts, password hashing, roles, OTP, rate limiting"""
