from typing import Tuple

# budget de caractères envoyés au modèle (coût / latence)
DEFAULT_TEXT_BUDGET = 6000

SUMMARY_TEMPLATE = """
Summarize the following study notes in 3-5 bullet points:
-----
{text}
-----"""

POINTS_TEMPLATE = """
Generate 4-6 possible exam questions based on these notes:
-----
{text}
-----"""


def truncate(text: str, budget: int = DEFAULT_TEXT_BUDGET) -> str:
    # simple préfixe, coupe en milieu de phrase si besoin
    if budget <= 0:
        raise ValueError("budget must be positive")
    return text[:budget]


def build_prompts(text: str, budget: int = DEFAULT_TEXT_BUDGET) -> Tuple[str, str]:
    """Retourne (prompt résumé, prompt questions d'examen)."""
    excerpt = truncate(text, budget)
    return SUMMARY_TEMPLATE.format(text=excerpt), POINTS_TEMPLATE.format(text=excerpt)
