"""QuizHub - online question bank and exam practice backend"""

__version__ = "1.0.0"
