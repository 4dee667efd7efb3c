"""
HTTP API for the curriculum engine.
"""
