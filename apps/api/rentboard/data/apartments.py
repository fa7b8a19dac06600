"""Demo apartments used to seed snapshots for local development."""
from __future__ import annotations

from typing import Any

DEMO_OWNER_ID = "owner-demo"

DEMO_APARTMENTS: list[dict[str, Any]] = [
    {
        "apartmentId": "1",
        "ownerId": DEMO_OWNER_ID,
        "apartment_name": "Student comfort near AITU",
        "description": "Bright flat next to the university. Great for students.",
        "address": {
            "street": "Kabanbay Batyr Ave",
            "house_number": "10",
            "apartment_number": "12",
            "entrance": "2",
            "has_intercom": True,
            "landmark": "next to Burger King",
        },
        "district_name": "Yesil",
        "latitude": 51.0909,
        "longitude": 71.4187,
        "price_per_month": 95_000,
        "area": 50.0,
        "kitchen_area": 8.0,
        "floor": 5,
        "number_of_rooms": 2,
        "max_users": 2,
        "available_from": "2025-05-01",
        "available_until": "2025-08-31",
        "university_nearby": "Astana IT University",
        "pictures": ["https://cdn.domain.com/img1.jpg", "https://cdn.domain.com/img2.jpg"],
        "is_promoted": False,
        "is_pet_allowed": True,
        "rental_type": "room",
        "roommate_preferences": "quiet, female, no pets",
        "included_utilities": ["Wi-Fi", "water", "furniture", "washing machine"],
        "rules": ["female tenants only", "no smoking"],
        "contact_phone": "+77001234567",
        "contact_telegram": "@aitu_host",
        "created_at": "2025-03-01T09:00:00+00:00",
        "is_active": True,
    },
    {
        "apartmentId": "2",
        "ownerId": DEMO_OWNER_ID,
        "apartment_name": "Cosy flat in the centre",
        "description": "Comfortable flat for students in the city centre, close to everything.",
        "address": {
            "street": "Dostyk St",
            "house_number": "5",
            "apartment_number": "42",
            "entrance": "1",
            "has_intercom": True,
            "landmark": "opposite Keruen mall",
        },
        "district_name": "Yesil",
        "latitude": 51.1209,
        "longitude": 71.4307,
        "price_per_month": 120_000,
        "area": 65.0,
        "kitchen_area": 12.0,
        "floor": 8,
        "number_of_rooms": 3,
        "max_users": 3,
        "available_from": "2025-06-01",
        "available_until": "2025-12-31",
        "university_nearby": "Nazarbayev University",
        "pictures": [
            "https://cdn.domain.com/apartment2-1.jpg",
            "https://cdn.domain.com/apartment2-2.jpg",
            "https://cdn.domain.com/apartment2-3.jpg",
        ],
        "is_promoted": True,
        "is_pet_allowed": False,
        "rental_type": "full",
        "roommate_preferences": "students, tidy",
        "included_utilities": ["internet", "utilities", "television"],
        "rules": ["no smoking indoors", "no loud parties"],
        "contact_phone": "+77012345678",
        "contact_telegram": "@central_apartment",
        "created_at": "2025-03-15T12:30:00+00:00",
        "is_active": True,
    },
    {
        "apartmentId": "3",
        "ownerId": DEMO_OWNER_ID,
        "apartment_name": "Spacious flat for students",
        "description": "Large bright flat, ideal for sharing. Spacious rooms and a handy location.",
        "address": {
            "street": "Syganak St",
            "house_number": "15",
            "apartment_number": "89",
            "entrance": "3",
            "has_intercom": True,
            "landmark": "next to the park",
        },
        "district_name": "Almaty",
        "latitude": 51.0876,
        "longitude": 71.4023,
        "price_per_month": 150_000,
        "area": 85.0,
        "kitchen_area": 14.0,
        "floor": 12,
        "number_of_rooms": 4,
        "max_users": 4,
        "available_from": "2025-05-15",
        "available_until": "2026-05-15",
        "university_nearby": "Eurasian National University",
        "pictures": [
            "https://cdn.domain.com/apartment3-1.jpg",
            "https://cdn.domain.com/apartment3-2.jpg",
        ],
        "is_promoted": False,
        "is_pet_allowed": True,
        "rental_type": "full",
        "roommate_preferences": "students, calm, neat",
        "included_utilities": ["water", "electricity", "internet", "furniture", "appliances"],
        "rules": ["quiet after 22:00", "take care of the furniture"],
        "contact_phone": "+77023456789",
        "contact_telegram": "@spacious_flat",
        "created_at": "2025-04-02T08:15:00+00:00",
        "is_active": False,
    },
]
