"""
Placeholder images for contacts and companies without one.

Generated DiceBear URLs are deterministic for the same inputs.
"""
from urllib.parse import quote

DICEBEAR_BASE_URL = "https://api.dicebear.com/7.x"
BACKGROUND_COLORS = "3b82f6,8b5cf6,f59e0b,10b981,ef4444"


def contact_avatar_url(name: str, company: str | None = None) -> str:
    seed = "".join(name.lower().split())
    if company:
        seed = f"{seed}-{company}"
    return f"{DICEBEAR_BASE_URL}/avataaars/svg?seed={quote(seed)}&backgroundColor={BACKGROUND_COLORS}"


def company_logo_url(company_name: str) -> str:
    """Two-letter initials badge."""
    return (
        f"{DICEBEAR_BASE_URL}/initials/svg?seed={quote(company_name)}"
        f"&backgroundColor={BACKGROUND_COLORS}&textColor=ffffff&chars=2"
    )
