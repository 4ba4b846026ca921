"""Generation providers"""
