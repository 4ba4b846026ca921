"""Mood dictionary sources"""
