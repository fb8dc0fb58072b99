"""Request and response schemas for the QuizHub API"""
