"""Anonymous public-link endpoints"""
