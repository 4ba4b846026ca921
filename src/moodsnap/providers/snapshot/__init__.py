"""Insight snapshot stores"""
