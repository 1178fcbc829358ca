"""Infrastructure adapters (object storage, AI classifier)"""
