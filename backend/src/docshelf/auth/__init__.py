"""Bearer token authentication"""
