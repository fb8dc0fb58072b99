"""Configuration, database, security, logging and caching"""
