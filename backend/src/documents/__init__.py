"""Document listing, approval and review API"""
