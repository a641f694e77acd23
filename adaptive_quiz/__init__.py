"""
Adaptive Trivia Quiz: sequences trivia questions one at a time and
re-ranks the remaining questions based on how well the player is doing.
"""
