"""Domain layer: workflow rules, ports and errors, free of HTTP and storage plumbing"""
