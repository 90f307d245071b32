"""
Tests for generated placeholder images.
"""
from dealflow.utils.avatars import DICEBEAR_BASE_URL, company_logo_url, contact_avatar_url


def test_contact_avatar_is_deterministic():
    assert contact_avatar_url("Jane Cooper", "Northwind") == contact_avatar_url("Jane Cooper", "Northwind")


def test_contact_avatar_seed():
    url = contact_avatar_url("Jane  Cooper", "Northwind")

    assert url.startswith(f"{DICEBEAR_BASE_URL}/avataaars/svg?seed=janecooper-Northwind")


def test_contact_avatar_without_company():
    assert "seed=janecooper&" in contact_avatar_url("Jane Cooper")


def test_company_logo_is_quoted():
    url = company_logo_url("Acme & Sons")

    assert url.startswith(f"{DICEBEAR_BASE_URL}/initials/svg?seed=Acme%20%26%20Sons")
    assert url.endswith("chars=2")
