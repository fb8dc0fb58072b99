"""Business logic for QuizHub; endpoints stay thin and delegate here"""
