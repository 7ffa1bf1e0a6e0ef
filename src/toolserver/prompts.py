"""Text prompt templates exposed to MCP clients."""


def reverse_word(word: str) -> str:
    """Reverse a word and output only the reversed word."""
    return (
        "Reverse the following word exactly and output only the reversed word "
        f"with no explanation or punctuation. Word: {word}"
    )


def one_sentence_summary(text: str) -> str:
    """Provide a single concise sentence summarizing the provided text."""
    return (
        "Provide a single concise sentence that summarizes the following content. "
        f"Keep it under 25 words.\n\nContent:\n{text}"
    )


def summary_benefits_and_references(topic: str) -> str:
    """Provide a short summary, a bullet list of benefits, and a list of references."""
    return (
        "You are a helpful technical writer. Using the topic below, produce Markdown with: "
        "1) a brief summary paragraph; 2) a bullet list of key benefits; "
        "3) a bullet list of references (URLs or titles). "
        "Be accurate, avoid speculation, and do not fabricate references. If unsure, say so.\n\n"
        f"Topic:\n{topic}"
    )
