import unicodedata
from functools import lru_cache

# Thessaloniki street-name abbreviations (lowercase, accents removed -> expanded)
ABBREVIATIONS: dict[str, str] = {
    "λεωφ.": "λεωφορος",
    "αγ.": "αγιος ",
    "πλ.": "πλατεια ",
    "ave.": "avenue",
    "sq.": "square",
}


@lru_cache(maxsize=4096)
def remove_accents(text: str) -> str:
    """Remove accents from text, including the Greek tonos and dialytika.

    Example: "Καμάρα" -> "Καμαρα"
    """
    # Normalize to NFD (decomposes accented characters)
    normalized = unicodedata.normalize("NFD", text)
    # Remove combining diacritical marks
    return "".join(c for c in normalized if unicodedata.category(c) != "Mn")


@lru_cache(maxsize=4096)
def normalize_text(text: str) -> str:
    """Normalize text for matching.

    - Converts to lowercase
    - Removes accents
    - Expands abbreviations
    - Folds final sigma so word position does not matter
    - Normalizes whitespace

    Example: "ΛΕΩΦ. ΝΙΚΗΣ" -> "λεωφοροσ νικησ"
    """
    result = remove_accents(text.lower().strip())

    for abbrev, expanded in ABBREVIATIONS.items():
        result = result.replace(abbrev, expanded)

    result = result.replace("ς", "σ")

    return " ".join(result.split())

