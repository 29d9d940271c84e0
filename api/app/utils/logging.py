import re


def redact_pii(text: str) -> str:
    """
    Redact potential Personally Identifiable Information (PII) from text.

    Immigration questions often carry case identifiers, so this function
    redacts, in order:
    - USCIS receipt numbers (e.g. EAC2190012345, IOE0912345678)
    - Alien registration numbers (A-numbers, e.g. A123456789, A-12345678)
    - US Social Security numbers
    - Email addresses
    - IP addresses
    - Phone numbers
    - Long numeric sequences
    """
    if not text:
        return text

    # USCIS receipt numbers: three-letter service center code + 10 digits
    text = re.sub(
        r"\b(?:EAC|WAC|LIN|SRC|NBC|MSC|IOE|YSC)\d{10}\b",
        "[RECEIPT_NUMBER]",
        text,
        flags=re.IGNORECASE,
    )

    # Alien registration numbers
    text = re.sub(r"\bA-?\d{8,9}\b", "[A_NUMBER]", text, flags=re.IGNORECASE)

    # Social Security numbers
    text = re.sub(r"\b\d{3}-\d{2}-\d{4}\b", "[SSN]", text)

    # Email addresses
    text = re.sub(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}", "[EMAIL]", text)

    # IP addresses
    text = re.sub(r"\b(?:\d{1,3}\.){3}\d{1,3}\b", "[IP]", text)

    # Phone numbers in various formats
    text = re.sub(
        r"(?:\+\d{1,3}[-. ]?)?\(?\b\d{3}\)?[-. ]?\d{3}[-. ]?\d{4}\b", "[PHONE]", text
    )

    # Long numeric sequences that might be passport or case numbers
    text = re.sub(r"\b\d{8,}\b", "[ID]", text)

    return text
