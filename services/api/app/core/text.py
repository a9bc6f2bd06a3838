import re


def generate_slug(name: str, fallback: str = "category") -> str:
    # Lowercase, replace spaces/symbols with hyphens
    slug = name.lower()
    slug = re.sub(r"[^a-z0-9]+", "-", slug)
    slug = slug.strip("-")
    return slug or fallback


def normalize_email(email: str) -> str:
    return email.strip().lower()


_DESCRIPTORS = [
    "fresh", "chopped", "minced", "diced", "sliced",
    "optional", "to taste", "for garnish",
    "large", "medium", "small",
    "organic",
]


def normalize_item_key(name: str) -> str:
    """
    Normalize an ingredient/item name into an aggregation key.

    "Fresh Tomatoes (ripe)" and "tomato" end up under the same key so
    shopping lists built from several recipes sum them instead of listing
    both.
    """
    if not name:
        return ""

    s = name.lower()
    s = re.sub(r"\(.*?\)", "", s)
    s = re.sub(r"[^\w\s]", " ", s)
    s = re.sub(r"\s+", " ", s).strip()

    for desc in _DESCRIPTORS:
        s = re.sub(rf"\b{desc}\b", "", s)
    s = re.sub(r"\s+", " ", s).strip()

    # Naive singularization: tomatoes -> tomato, eggs -> egg
    words = []
    for w in s.split():
        if len(w) > 4 and w.endswith("oes"):
            words.append(w[:-2])
        elif len(w) > 3 and w.endswith("s") and not w.endswith("ss"):
            words.append(w[:-1])
        else:
            words.append(w)
    return " ".join(words)
