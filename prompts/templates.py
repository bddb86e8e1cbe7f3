"""Fixed prompts and user-facing messages for the character creator."""

from __future__ import annotations

# --- Remote model instructions ---

RECOGNITION_PROMPT = (
    "Is this image of a person, an animal, or a character (real or animated)? "
    "Answer with only 'yes' or 'no'."
)

TRANSFORMATION_PROMPT = (
    "Transform the character in this image into a 2D Ghibli-style animation. "
    "It's very important to keep the character's original facial features, clothes, "
    "and skin color exactly the same. "
    "The background should be a simple, soft-colored Ghibli-style background."
)

# Normalized substring that marks a positive recognition verdict
AFFIRMATIVE_TOKEN = "yes"

# --- Status and error messages ---

ANALYZING_MESSAGE = "Analyzing image..."
GENERATING_MESSAGE = "Character found! Generating your Ghibli version..."

NOT_A_SUBJECT_MESSAGE = (
    "This does not seem to be a character, person, or animal. "
    "Please upload a different image."
)
GENERATION_FAILED_MESSAGE = "Failed to generate the image. Please try again."
GENERIC_ERROR_MESSAGE = "An unexpected error occurred. Please try again."
