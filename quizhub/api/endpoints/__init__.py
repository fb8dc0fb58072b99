"""REST endpoint routers"""
