from datetime import datetime

SAMPLE_FEEDBACK = [
    {"name": "Asha", "email": "asha@example.com", "rating": 5, "comments": "Loved the paneer wrap, quick service.", "created_at": datetime(2024, 6, 1, 9, 15), "owner_id": "demo-owner"},
    {"name": None, "email": None, "rating": 4, "comments": "Good coffee, a bit noisy at lunch.", "created_at": datetime(2024, 6, 1, 13, 40), "owner_id": "demo-owner"},
    {"name": "Marco", "email": None, "rating": 2, "comments": "Waited 25 minutes for a salad.", "created_at": datetime(2024, 6, 2, 12, 5), "owner_id": "demo-owner"},
    {"name": "Lena", "email": "lena@example.com", "rating": 3, "comments": "Portions were smaller than last time.", "created_at": datetime(2024, 6, 2, 19, 30), "owner_id": "demo-owner"},
    {"name": None, "email": None, "rating": 5, "comments": "Friendly staff, will come back.", "created_at": datetime(2024, 6, 3, 8, 50), "owner_id": "demo-owner"},
    {"name": "Tom", "email": "tom@example.com", "rating": 1, "comments": "Order was wrong and nobody fixed it.", "created_at": datetime(2024, 6, 4, 20, 10), "owner_id": "demo-owner"},
    {"name": "Priya", "email": None, "rating": 4, "comments": "Nice vegan options on the new menu.", "created_at": datetime(2024, 6, 5, 12, 45), "owner_id": "demo-owner"},
]
