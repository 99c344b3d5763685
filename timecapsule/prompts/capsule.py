"""
AI prompts for capsule enrichment.
"""

# Output budgets and sampling for the two generation calls.
SUMMARY_GENERATION = {"max_output_tokens": 150, "temperature": 0.7}
FUTURE_REPLY_GENERATION = {"max_output_tokens": 300, "temperature": 0.8}

SUMMARY_FALLBACK = "Unable to generate summary"
FUTURE_REPLY_FALLBACK = "Unable to generate future response"


def summarization_prompt(title: str, content: str) -> str:
    """
    Prompt for a short summary of a capsule message.

    Args:
        title: Capsule title
        content: Capsule message

    Returns:
        Formatted prompt string
    """
    return (
        "Summarize this personal time capsule message in 2-3 sentences. "
        "Focus on the key emotions, themes, and important details:\n\n"
        f"Title: {title}\n"
        f"Message: {content}"
    )


def future_self_prompt(title: str, content: str) -> str:
    """
    Prompt for a reply written by the author's future self.

    Args:
        title: Capsule title
        content: Capsule message

    Returns:
        Formatted prompt string
    """
    return (
        "You are the future version of the person who wrote this time capsule message "
        "5-10 years ago. You are wiser, more experienced, and reflecting back on this "
        "moment in your life. Write a warm, encouraging response to your past self. "
        "Be specific about growth, lessons learned, and perspective gained. "
        "Keep it personal and heartfelt.\n\n"
        "Original message:\n"
        f"Title: {title}\n"
        f"Message: {content}"
    )
