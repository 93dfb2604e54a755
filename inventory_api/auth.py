"""Authentication endpoints.

Authentication is mocked: login always succeeds and hands back a static token
with a fixed admin user, registration echoes the submitted user, and the
current-user endpoint returns a fixed profile. Nothing here checks
credentials or stores users.

Copyright (c) Bryn Gwalad 2025
"""

import logging

from fastapi import APIRouter

from .schemas import Credentials, Registration

logger = logging.getLogger("inventory_api.auth")

router = APIRouter(prefix="/auth", tags=["auth"])

MOCK_TOKEN = "mock-jwt-token"

MOCK_PROFILE = {
    "id": 1,
    "name": "John Doe",
    "email": "john.doe@example.com",
    "role": "admin",
    "department": "Operations",
    "phone": "+91 9876543210",
    "address": "Whitefield, Bangalore, Karnataka, India - 560066",
    "joinDate": "2022-05-15",
}


@router.post("/login")
def login(credentials: Credentials):
    """Return the static token for any credentials."""
    logger.info("Login attempt for user: %s", credentials.email)
    return {
        "success": True,
        "token": MOCK_TOKEN,
        "user": {"id": 1, "name": MOCK_PROFILE["name"], "email": credentials.email, "role": "admin"},
    }


@router.post("/register")
def register(registration: Registration):
    logger.info("New user registration: %s", registration.email)
    return {
        "success": True,
        "message": "User registered successfully",
        "user": {"id": 1, "name": registration.name, "email": registration.email, "role": "user"},
    }


@router.get("/user")
def current_user():
    logger.info("User info request")
    return {"success": True, "user": dict(MOCK_PROFILE)}
