"""Web 层"""
