"""
Market API - users and products catalog backend
"""
