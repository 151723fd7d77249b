REFUSAL_MESSAGE = (
    "Hey there, superstar! You're stronger than you think, and I'm here to cheer you on. "
    "Let's stay focused on chronic illness management for now, shall we?"
)

FAILURE_MESSAGE = "Sorry, something went wrong. Please try again. Error: {error}"
