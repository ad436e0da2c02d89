"""
Shared constants for Party Hub.

This module contains constant values used throughout the hub,
including session states, connection roles, word lists and categories.
"""

import string

# Session state constants
SESSION_STATES = {
    'LOBBY': 'lobby',      # Waiting in the lobby, game can be selected
    'PLAYING': 'playing'   # A game handler owns the session state
}

# Connection roles
ROLES = {
    'PRESENTER': 'presenter',
    'PARTICIPANT': 'participant'
}

# Socket.IO events emitted by the hub
EVENTS = {
    'STATE': 'session:state',
    'ERROR': 'session:error',
    'CATALOG': 'catalog:list',
    'SUPERSEDED': 'presenter:superseded'
}

# Session limits
SESSION_CONFIG = {
    'CODE_LENGTH': 6,
    'CODE_ATTEMPTS': 100,
    'MIN_NAME_LENGTH': 1,
    'MAX_NAME_LENGTH': 20,
    'GRACE_SECONDS': 60
}

# Alphabet used for the word category game
LETTERS = list(string.ascii_uppercase)

# Categories for the word category game
WORD_CATEGORIES = [
    "Animals", "Fruits", "Vegetables", "Countries", "Cities", "Sports",
    "Musical Instruments", "Movies", "TV Shows", "Famous People",
    "Things in a Kitchen", "Things at the Beach", "Colors", "Jobs",
    "Things That Fly", "Board Games", "Desserts", "Clothing", "Body Parts",
    "Things in a School", "Vehicles", "Flowers", "Drinks", "Book Titles",
    "Cartoon Characters", "Things You Plug In", "Pizza Toppings",
    "Things That Are Cold", "Things in a Park", "Breakfast Foods",
    "Tools", "Hobbies", "Things With Wheels", "Superheroes", "Insects",
    "Things in a Bathroom", "Languages", "Rivers", "Weather", "Toys"
]

# Words for the drawing contest
DRAWING_WORDS = [
    "Cat", "House", "Tree", "Car", "Bicycle", "Pizza", "Robot", "Sun",
    "Mountain", "Fish", "Flower", "Castle", "Dragon", "Rocket", "Guitar",
    "Coffee", "Umbrella", "Butterfly", "Spaceship", "Rainbow"
]

# Questions used when the story questions cannot be generated
FALLBACK_STORY_QUESTIONS = [
    "Name a place",
    "Name a character",
    "What happens?",
    "What is the mood?",
    "Name an object",
    "What time of day is it?",
    "What color stands out?",
    "Who appears?"
]

# Maximum length of a free text answer
MAX_ANSWER_LENGTH = 100
