"""PDF upload API"""
