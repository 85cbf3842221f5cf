from __future__ import annotations

FLASHCARDS_TEMPLATE = (
    "Create {count} flashcards from the following text about {subject}. "
    "Each flashcard should have a clear question on the front and a comprehensive answer on the back. "
    "Format your response as a JSON array with objects containing 'front' and 'back' properties for each flashcard. "
    "Only return the JSON array, nothing else.\n\n"
    "Text: {text}"
)

SUMMARY_TEMPLATE = (
    "Summarize the following text in a {summary_type} style, "
    "capturing about {summary_length}% of the original content:\n\n{text}"
)

BULLET_SUMMARY_TEMPLATE = (
    "Create bullet points for the key information in the following text, "
    "capturing about {summary_length}% of the original content:\n\n{text}"
)

DOUBT_TEMPLATE = (
    "As an educational AI assistant, please provide a detailed and informative answer "
    "to the following academic question:\n\n{question}\n\n{context}"
)

FOLLOW_UP_CONTEXT_TEMPLATE = "This is a follow-up question. Previous conversation:\n{conversation}"
