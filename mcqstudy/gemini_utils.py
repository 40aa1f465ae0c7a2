# mcqstudy/gemini_utils.py
import logging
import re

import google.generativeai as genai

from .config import get_settings

logger = logging.getLogger(__name__)

# keep the source excerpt inside the prompt budget
MAX_CONTEXT_CHARS = 3500

DRAFT_PROMPT = """
Generate exactly {num} multiple-choice questions of {difficulty} difficulty from the context below.
Return plain readable questions only, each formatted as:
1. Question text
A) option A
B) option B
C) option C
D) option D
Answer: B
Explanation: one sentence

Context:
{context}
"""


def configure_gemini(api_key: str | None = None):
    """
    Configure google.generativeai with an API key.
    Reads GEMINI_API_KEY from the environment (or .env) if api_key is not provided.
    """
    key = api_key or get_settings().gemini_api_key
    if not key:
        raise RuntimeError("GEMINI_API_KEY not set. Set environment variable or pass it to configure_gemini().")
    genai.configure(api_key=key)


def gemini_generate(prompt: str) -> str:
    """
    Send prompt to Gemini and return plain text response.
    """
    model = genai.GenerativeModel(get_settings().gemini_model)
    response = model.generate_content(prompt)
    # response.text should contain the reply for this SDK version
    return getattr(response, "text", "") or ""


def normalize_inline_options(text: str) -> str:
    """
    Clean up generator output so options (A) B) C) D)) are on their own lines,
    strip noisy headers, and normalize whitespace.
    """
    if not text:
        return ""

    # Remove leading boilerplate like "Here are 10 MCQ questions:"
    text = re.sub(r"(?i)here are.*?questions.*?:", "", text)
    # Drop markdown bold the model sometimes adds around labels
    text = text.replace("**", "")

    # Make sure A) B) C) D) start on their own line
    text = re.sub(r"(?<!\n)[ \t]+([A-D]\)\s)", r"\n\1", text)

    lines = text.splitlines()
    cleaned = [re.sub(r"[ \t]+", " ", ln).strip() for ln in lines]
    return "\n".join(cleaned).strip()


def draft_questions(source_text: str, num_questions: int = 8, difficulty: str = "Medium") -> str:
    """
    Ask Gemini for questions about source_text in the numbered/lettered line
    format and return the cleaned text, ready for parser.parse_input().
    """
    configure_gemini()
    prompt = DRAFT_PROMPT.format(
        num=num_questions, difficulty=difficulty, context=source_text[:MAX_CONTEXT_CHARS]
    )
    logger.info("Requesting %d drafted question(s) from Gemini", num_questions)
    return normalize_inline_options(gemini_generate(prompt))
