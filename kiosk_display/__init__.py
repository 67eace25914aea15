"""Kiosk now-playing display"""
