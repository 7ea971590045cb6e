"""Croatian phrase flashcards with SM-2 lite spaced repetition."""
