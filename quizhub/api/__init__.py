"""REST API routers"""
