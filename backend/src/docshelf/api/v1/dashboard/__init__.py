"""Dashboard endpoints"""
