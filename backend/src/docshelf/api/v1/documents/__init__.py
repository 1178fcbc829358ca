"""Document and share endpoints"""
