# app/services/api.py

import os
import requests
from dotenv import load_dotenv


load_dotenv()

# Base URL of the FastAPI backend
API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")
API_TIMEOUT = float(os.getenv("API_TIMEOUT", "10"))

USERS_URL = f"{API_BASE_URL}/api/users"


def _request(method, url, **kwargs):
    """
    Sends a request and always hands back an envelope dict, so callers
    only ever check `success`.
    """
    try:
        res = requests.request(method, url, timeout=API_TIMEOUT, **kwargs)
    except requests.RequestException as e:
        return {"success": False, "message": f"Network error: {e}"}

    try:
        data = res.json()
    except ValueError:
        return {"success": False, "message": f"Unexpected response (status {res.status_code})"}

    if not isinstance(data, dict):
        return {"success": False, "message": f"Unexpected response (status {res.status_code})"}
    return data


# -------------------------------
# User CRUD
# -------------------------------

def list_users():
    return _request("GET", USERS_URL)


def get_user(user_id):
    return _request("GET", f"{USERS_URL}/{user_id}")


def create_user(username, email, password):
    payload = {"username": username, "email": email, "password": password}
    return _request("POST", USERS_URL, json=payload)


def update_user(user_id, username=None, email=None, password=None):
    """
    Only non-empty values are sent; the server leaves the rest unchanged.
    """
    payload = {
        key: value
        for key, value in {"username": username, "email": email, "password": password}.items()
        if value
    }
    return _request("PUT", f"{USERS_URL}/{user_id}", json=payload)


def delete_user(user_id):
    return _request("DELETE", f"{USERS_URL}/{user_id}")
