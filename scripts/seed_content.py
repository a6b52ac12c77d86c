#!/usr/bin/env python3
"""Load sample marketing content into a running site through its API.

Usage::

    API_BASE=http://localhost:8000 ADMIN_USERNAME=admin ADMIN_PASSWORD=... python -m scripts.seed_content
"""
import logging
import os
import sys

from dotenv import load_dotenv

from scripts.api_client import ApiError, SiteClient
from settings import setup_logging

logger = logging.getLogger("scripts.seed_content")

WHY_CHOOSE = {
    "title": "Why Choose Us?",
    "intro": [
        "Founded in 2014, we provide audit, accounting, tax, business valuation and advisory services "
        "to companies of all sizes, currently serving clients in the US and UK.",
    ],
    "benefits": [
        {
            "title": "Save Money & Reduce Overheads",
            "description": "Outsourcing your accounting removes the cost of training, benefits, software "
                           "and office supplies for an internal department.",
        },
        {
            "title": "Improve Operational Efficiency",
            "description": "Less time spent on bills and payroll means more time to manage and grow the business.",
        },
        {
            "title": "Access To Expert Accounting Professionals",
            "description": "A team of skilled accountants keeps your books current and your filings on time.",
        },
    ],
    "mission": "To deliver result-oriented solutions that keep clients financially sound today "
               "while preparing them for tomorrow.",
    "vision": "To house the best talent and deliver mission-critical outsourcing solutions with "
              "in-depth industry insight.",
    "core_values": [
        "Grow meaningful relationships built on exceptional service and mutual trust.",
        "Maintain sincerity and honesty in our work.",
        "Take accountability for our actions, services and decisions.",
    ],
}

TESTIMONIALS = [
    {"name": "Jennifer M.", "title": "CPA, Managing Partner",
     "quote": "Their team took our month-end close from two weeks to four days."},
    {"name": "Robert K.", "title": "Owner, Retail Group",
     "quote": "Accurate, responsive and always on time. We could not ask for a better partner."},
]

INDUSTRIES = [
    {"title": "Healthcare", "description": "Revenue cycle, payroll and compliance support for practices and clinics.",
     "image": "https://images.unsplash.com/photo-1576091160399-112ba8d25d1d?w=800", "tags": ["Medical", "Dental"]},
    {"title": "Real Estate", "description": "Property accounting, owner statements and 1031 exchange tracking.",
     "image": "https://images.unsplash.com/photo-1560518883-ce09059eeffa?w=800", "tags": ["Property management"]},
    {"title": "Restaurants", "description": "Daily sales reconciliation, inventory costing and payroll.",
     "image": "https://images.unsplash.com/photo-1517248135467-4c7edcad34c4?w=800", "tags": ["Hospitality"]},
]

TRUSTED_COMPANIES = [
    {"name": "QuickBooks", "image": "https://upload.wikimedia.org/wikipedia/commons/9/9d/Intuit_QuickBooks_logo.png"},
    {"name": "Xero", "image": "https://upload.wikimedia.org/wikipedia/en/9/9f/Xero_software_logo.svg"},
]

SERVICES = [
    {
        "category": {
            "name": "Bookkeeping Services",
            "description": "Full-cycle bookkeeping and transaction processing for small and mid-sized businesses.",
        },
        "hero_section": {
            "title": "Bookkeeping Services",
            "description": "Outsource bookkeeping to certified professionals and cut accounting overheads.",
        },
        "card_sections": [{
            "section_title": "What we handle",
            "cards": [
                {"title": "Accounts Payable Management", "description": "Vendor bills, approvals and timely payments."},
                {"title": "Bank & Credit Card Reconciliations",
                 "description": "Monthly reconciliations that keep balances accurate."},
            ],
        }],
        "content": "<p>Precise entries for every transaction, without an in-house team.</p>",
    },
    {
        "category": {
            "name": "Tax Filing Services",
            "description": "Individual and business tax return preparation, federal and multi-state.",
        },
        "hero_section": {
            "title": "Tax Filing Services",
            "description": "Returns prepared and reviewed by experienced tax professionals.",
        },
        "card_sections": [{
            "section_title": "Returns we prepare",
            "cards": [
                {"title": "Individual Returns", "description": "Form 1040 with all supporting schedules."},
                {"title": "Business Returns", "description": "Partnerships, S and C corporations."},
            ],
        }],
        "content": "",
    },
]


def seed(client: SiteClient) -> dict:
    """Send every sample item; failures are logged and counted, not fatal."""
    counts = {"created": 0, "failed": 0}

    def attempt(method: str, path: str, payload: dict) -> None:
        try:
            client.send(method, path, json=payload)
            counts["created"] += 1
        except ApiError as exc:
            logger.error("%s", exc)
            counts["failed"] += 1

    attempt("PUT", "/api/why-choose", WHY_CHOOSE)
    for item in TESTIMONIALS:
        attempt("POST", "/api/testimonials", item)
    for item in INDUSTRIES:
        attempt("POST", "/api/industries", item)
    for item in TRUSTED_COMPANIES:
        attempt("POST", "/api/trusted-companies", item)
    return counts


def seed_services(client: SiteClient) -> dict:
    """Create each sample category, then its service under the new category id."""
    counts = {"created": 0, "failed": 0}
    for entry in SERVICES:
        try:
            created = client.send("POST", "/api/services/categories", json=entry["category"])
            category_id = created["data"]["id"]
            service = {key: value for key, value in entry.items() if key != "category"}
            client.send("POST", "/api/services", json=dict(service, category_id=category_id))
            counts["created"] += 1
        except (ApiError, KeyError, TypeError) as exc:
            logger.error("Service %s not seeded: %s", entry["hero_section"]["title"], exc)
            counts["failed"] += 1
    return counts


def main() -> int:
    load_dotenv()
    setup_logging(os.getenv("LOG_LEVEL", "INFO"))
    with SiteClient() as client:
        try:
            client.login(os.getenv("ADMIN_USERNAME", "admin"), os.getenv("ADMIN_PASSWORD", ""))
        except ApiError as exc:
            logger.critical("%s", exc)
            return 1
        counts = seed(client)
        for key, value in seed_services(client).items():
            counts[key] += value
    print(f"Seeded: created={counts['created']}, failed={counts['failed']}")
    return 0 if counts["failed"] == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
