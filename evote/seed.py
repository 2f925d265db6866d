# evote/seed.py
# Default records loaded into an empty store for development
import logging

from .models.admin_model import AdminCreate
from .models.candidate_model import CandidateCreate
from .models.voter_model import VoterCreate

logger = logging.getLogger(__name__)

PLACEHOLDER_PROFILE_IMAGE = (
    "data:image/svg+xml;base64,PHN2ZyB4bWxucz0iaHR0cDovL3d3dy53My5vcmcvMjAwMC9zdmciIHZpZXdCb3g9IjAgMCAyMDAgMjAwIj48"
    "cmVjdCB3aWR0aD0iMjAwIiBoZWlnaHQ9IjIwMCIgZmlsbD0iI2U2ZTZlNiIvPjxjaXJjbGUgY3g9IjEwMCIgY3k9IjcwIiByPSI0MCIgZmls"
    "bD0iIzk5OSIvPjxwYXRoIGQ9Ik01MCwxODAgTDUwLDE0MCBDNTAsMTAwIDc1LDkwIDEwMCw5MCBDMTMwLDkwIDE1MCwxMDAgMTUwLDE0MCBM"
    "MTUwLDE4MCI+PC9wYXRoPjwvc3ZnPg=="
)

DEFAULT_ADMIN = AdminCreate(username="admin", password="admin123")

DEFAULT_CANDIDATES = [
    CandidateCreate(name=name, party_name=f"Party {letter}",
                    party_logo=f"https://via.placeholder.com/50?text={letter}",
                    constituency="Bangalore Urban")
    for name, letter in [
        ("Amit Sharma", "A"),
        ("Priya Patel", "B"),
        ("Rajiv Singh", "C"),
        ("Sunita Gupta", "D"),
    ]
]

# the demo voters log in with their date of birth
DEFAULT_VOTERS = [
    VoterCreate(
        voter_id="ABCD1234567",
        aadhaar_number="1234-5678-9012",
        name="Rahul Kumar",
        password="15/08/1985",
        dob="15/08/1985",
        age=37,
        email="rahul.kumar@example.com",
        gender="Male",
        address="123 Main Street, Gandhi Nagar, Apartment 4B",
        state="Karnataka",
        district="Bangalore Urban",
        pincode="560001",
        marital_status="Married",
        profile_image=PLACEHOLDER_PROFILE_IMAGE,
    ),
    VoterCreate(
        voter_id="EFGH9876543",
        aadhaar_number="5678-9012-3456",
        name="Priya Singh",
        password="20/05/1994",
        dob="20/05/1994",
        age=29,
        email="priya.singh@example.com",
        gender="Female",
        address="456 Park Avenue, Indira Nagar",
        state="Karnataka",
        district="Mysore",
        pincode="570001",
        marital_status="Single",
        profile_image=PLACEHOLDER_PROFILE_IMAGE,
    ),
]


async def seed_demo_data(storage) -> None:
    """Fill each empty table of `storage` with the demo records."""
    if not await storage.list_admins():
        await storage.create_admin(DEFAULT_ADMIN)
        logger.info("Created default admin user")

    if not await storage.list_candidates():
        for candidate in DEFAULT_CANDIDATES:
            await storage.create_candidate(candidate)
        logger.info("Created sample candidates")

    if not await storage.list_voters():
        for voter in DEFAULT_VOTERS:
            await storage.create_voter(voter)
        logger.info("Created sample voters")
